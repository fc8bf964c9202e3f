"""
Asset record store.

Owns the keyed table of asset records and enforces the lifecycle:

    (absent) --create--> OPEN --set_settlement_terms (0..n)--> OPEN
             --settle--> SETTLED (terminal)

Derived figures are computed on demand from the stored terms through the
formula engine; nothing derived is persisted.
"""

import logging
from datetime import date

from tokenfactor.domain import formulas
from tokenfactor.domain.fixed_point import checked_uint, to_date
from tokenfactor.domain.models import (
    AssetFigures,
    AssetRecord,
    AssetStatus,
    InitialTerms,
    SettlementTerms,
)
from tokenfactor.exceptions import AlreadyExists, AlreadySettled, NotFound, TenureTooShort
from tokenfactor.infrastructure.database import AssetRow, Database

logger = logging.getLogger(__name__)

# Minimum days between invoice date and due date for a new asset
MIN_INVOICE_TENURE_DAYS = 20

_INITIAL_FIELDS = (
    "factoring_fee",
    "discount_fee",
    "late_fee",
    "bank_charges_fee",
    "additional_fee",
    "grace_period",
    "advance_ratio",
    "due_date",
    "invoice_date",
    "funds_advanced_date",
    "invoice_amount",
    "invoice_limit",
)


def _to_record(row: AssetRow) -> AssetRecord:
    return AssetRecord(
        asset_number=row.asset_number,
        initial_terms=InitialTerms(**{name: getattr(row, name) for name in _INITIAL_FIELDS}),
        settlement_terms=SettlementTerms(
            payment_receipt_date=row.payment_receipt_date,
            buyer_amount_received=row.buyer_amount_received,
            supplier_amount_received=row.supplier_amount_received,
            payment_reserve_date=row.payment_reserve_date,
            supplier_amount_reserved=row.supplier_amount_reserved,
            reserve_payment_transaction_id=row.reserve_payment_transaction_id,
        ),
        status=AssetStatus(row.status),
    )


class AssetStore:
    """
    Persistent asset records with their transition rules.

    Every method runs inside ``Database.transaction()``; when called from an
    enclosing transaction it joins it, so callers can bundle a store write
    with ledger writes atomically.
    """

    def __init__(self, database: Database, engine=formulas) -> None:
        self.database = database
        self.formulas = engine

    def _open_row(self, session, asset_number: int) -> AssetRow:
        row = session.get(AssetRow, asset_number)
        if row is None:
            raise NotFound(f"Asset {asset_number} does not exist")
        if row.status == AssetStatus.SETTLED.value:
            raise AlreadySettled(f"Asset {asset_number} is already settled")
        return row

    def create(self, asset_number: int, initial_terms: InitialTerms) -> AssetRecord:
        """
        Insert a new OPEN asset with zeroed settlement terms.

        Raises:
            AlreadyExists: if the asset number is taken
            TenureTooShort: if due date minus invoice date is under 20 days
        """
        checked_uint(asset_number, "asset number")
        with self.database.transaction() as session:
            if session.get(AssetRow, asset_number) is not None:
                raise AlreadyExists(f"Asset {asset_number} already exists")

            tenure = self.formulas.invoice_tenure(initial_terms.due_date, initial_terms.invoice_date)
            if tenure < MIN_INVOICE_TENURE_DAYS:
                raise TenureTooShort(
                    f"Invoice tenure of asset {asset_number} is {tenure} days, "
                    f"minimum is {MIN_INVOICE_TENURE_DAYS}"
                )

            row = AssetRow(
                asset_number=asset_number,
                status=AssetStatus.OPEN.value,
                buyer_amount_received=0,
                supplier_amount_received=0,
                supplier_amount_reserved=0,
                **{name: getattr(initial_terms, name) for name in _INITIAL_FIELDS},
            )
            session.add(row)
            session.flush()
            record = _to_record(row)

        logger.info(f"Asset {asset_number} created (tenure {tenure} days)")
        return record

    def set_settlement_terms(
        self,
        asset_number: int,
        buyer_amount_received: int,
        supplier_amount_received: int,
        payment_receipt_date: date | int | None,
    ) -> AssetRecord:
        """Replace the settlement inputs of an OPEN asset."""
        checked_uint(buyer_amount_received, "buyer amount received")
        checked_uint(supplier_amount_received, "supplier amount received")
        with self.database.transaction() as session:
            row = self._open_row(session, asset_number)
            row.buyer_amount_received = buyer_amount_received
            row.supplier_amount_received = supplier_amount_received
            row.payment_receipt_date = to_date(payment_receipt_date)
            session.flush()
            record = _to_record(row)

        logger.info(f"Settlement terms of asset {asset_number} updated")
        return record

    def settle(
        self,
        asset_number: int,
        supplier_amount_reserved: int,
        reserve_payment_transaction_id: str,
        payment_reserve_date: date | int | None,
    ) -> AssetRecord:
        """Record the reserve payment and move the asset to SETTLED for good."""
        checked_uint(supplier_amount_reserved, "supplier amount reserved")
        with self.database.transaction() as session:
            row = self._open_row(session, asset_number)
            row.supplier_amount_reserved = supplier_amount_reserved
            row.reserve_payment_transaction_id = reserve_payment_transaction_id
            row.payment_reserve_date = to_date(payment_reserve_date)
            row.status = AssetStatus.SETTLED.value
            session.flush()
            record = _to_record(row)

        logger.info(f"Asset {asset_number} settled (reserve tx {reserve_payment_transaction_id})")
        return record

    def get(self, asset_number: int) -> AssetRecord:
        with self.database.transaction() as session:
            row = session.get(AssetRow, asset_number)
            if row is None:
                raise NotFound(f"Asset {asset_number} does not exist")
            return _to_record(row)

    def exists(self, asset_number: int) -> bool:
        with self.database.transaction() as session:
            return session.get(AssetRow, asset_number) is not None

    # Derived figures

    def figures(self, asset_number: int) -> AssetFigures:
        """All derived figures of an asset in one pass."""
        return AssetFigures.compute(self.get(asset_number), self.formulas)

    def calculate_invoice_tenure(self, asset_number: int) -> int:
        terms = self.get(asset_number).initial_terms
        return self.formulas.invoice_tenure(terms.due_date, terms.invoice_date)

    def calculate_late_days(self, asset_number: int) -> int:
        record = self.get(asset_number)
        return self.formulas.late_days(
            record.settlement_terms.payment_receipt_date,
            record.initial_terms.due_date,
            record.initial_terms.grace_period,
        )

    def calculate_finance_tenure(self, asset_number: int) -> int:
        return self.figures(asset_number).finance_tenure

    def calculate_advanced_amount(self, asset_number: int) -> int:
        terms = self.get(asset_number).initial_terms
        return self.formulas.advanced_amount(terms.invoice_limit, terms.advance_ratio)

    def calculate_reserve_amount(self, asset_number: int) -> int:
        terms = self.get(asset_number).initial_terms
        return self.formulas.reserve_amount(
            terms.invoice_amount,
            self.formulas.advanced_amount(terms.invoice_limit, terms.advance_ratio),
        )

    def calculate_factoring_amount(self, asset_number: int) -> int:
        terms = self.get(asset_number).initial_terms
        return self.formulas.factoring_amount(terms.invoice_amount, terms.factoring_fee)

    def calculate_discount_amount(self, asset_number: int) -> int:
        return self.figures(asset_number).discount_amount

    def calculate_late_amount(self, asset_number: int) -> int:
        return self.figures(asset_number).late_amount

    def calculate_total_fees(self, asset_number: int) -> int:
        return self.figures(asset_number).total_fees

    def calculate_total_amount_received(self, asset_number: int) -> int:
        settlement = self.get(asset_number).settlement_terms
        return self.formulas.total_amount_received(
            settlement.buyer_amount_received,
            settlement.supplier_amount_received,
        )

    def calculate_net_amount_payable_to_client(self, asset_number: int) -> int:
        return self.figures(asset_number).net_amount_payable_to_client

    def calculate_short_excess_payment_received(self, asset_number: int) -> int:
        return self.figures(asset_number).short_excess_payment_received
