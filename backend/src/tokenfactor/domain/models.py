"""
Domain models for tokenized invoice-factoring assets.

An asset is a factored invoice identified by its asset number. It carries
origination terms fixed at creation and settlement data that may be replaced
until the asset is settled.

Design Decisions:
- Frozen dataclass for InitialTerms: origination terms never change
- Scaled integers (hundredths) for every amount and rate, never float
- AssetStatus enum instead of a bare flag so the one-way gate is explicit
- Optional dates model the "unset" state instead of a 0 sentinel
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from . import formulas
from .fixed_point import to_date


class AssetStatus(Enum):
    """Lifecycle state of an asset. OPEN -> SETTLED, never reversed."""
    OPEN = "open"
    SETTLED = "settled"


def _require_amount(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int in hundredths, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


@dataclass(frozen=True)
class InitialTerms:
    """
    Origination terms of a factored invoice.

    Rates (``factoring_fee``, ``discount_fee``, ``late_fee``,
    ``advance_ratio``) are hundredths of a percent: 750 means 7.50%.
    Amounts (``bank_charges_fee``, ``additional_fee``, ``invoice_amount``,
    ``invoice_limit``) are hundredths of the settlement currency.
    """
    factoring_fee: int
    discount_fee: int
    late_fee: int
    bank_charges_fee: int
    additional_fee: int
    grace_period: int  # days
    advance_ratio: int
    due_date: date
    invoice_date: date
    funds_advanced_date: date
    invoice_amount: int
    invoice_limit: int

    def __post_init__(self) -> None:
        """Reject malformed values; business rules live in the store."""
        for name in (
            "factoring_fee",
            "discount_fee",
            "late_fee",
            "bank_charges_fee",
            "additional_fee",
            "grace_period",
            "advance_ratio",
            "invoice_amount",
            "invoice_limit",
        ):
            _require_amount(name, getattr(self, name))
        for name in ("due_date", "invoice_date", "funds_advanced_date"):
            value = getattr(self, name)
            if not isinstance(value, date):
                raise TypeError(f"{name} must be a date")
            if isinstance(value, datetime):
                object.__setattr__(self, name, to_date(value))

    @property
    def invoice_tenure(self) -> int:
        """Days from invoice date to due date."""
        return formulas.invoice_tenure(self.due_date, self.invoice_date)


@dataclass
class SettlementTerms:
    """
    Settlement inputs and closure data of an asset.

    The first three fields are replaced wholesale by each settlement update;
    the closure fields are written once, when the asset is settled.
    """
    payment_receipt_date: date | None = None
    buyer_amount_received: int = 0
    supplier_amount_received: int = 0

    # Closure
    payment_reserve_date: date | None = None
    supplier_amount_reserved: int = 0
    reserve_payment_transaction_id: str | None = None


@dataclass
class AssetRecord:
    """A factored invoice and its settlement state."""
    asset_number: int
    initial_terms: InitialTerms
    settlement_terms: SettlementTerms = field(default_factory=SettlementTerms)
    status: AssetStatus = AssetStatus.OPEN

    @property
    def settled(self) -> bool:
        """True once the asset reached its terminal state."""
        return self.status is AssetStatus.SETTLED


@dataclass(frozen=True)
class AssetFigures:
    """Every derived figure of one asset at a point in time."""
    asset_number: int
    invoice_tenure: int
    late_days: int
    finance_tenure: int
    advanced_amount: int
    reserve_amount: int
    factoring_amount: int
    discount_amount: int
    late_amount: int
    total_fees: int
    total_amount_received: int
    net_amount_payable_to_client: int
    short_excess_payment_received: int

    @classmethod
    def compute(cls, record: AssetRecord, engine=formulas) -> "AssetFigures":
        """Run the formula chain over a record's current terms."""
        terms = record.initial_terms
        settlement = record.settlement_terms

        advanced = engine.advanced_amount(terms.invoice_limit, terms.advance_ratio)
        late = engine.late_days(settlement.payment_receipt_date, terms.due_date, terms.grace_period)
        tenure = engine.finance_tenure(
            settlement.payment_receipt_date,
            terms.funds_advanced_date,
            due_date=terms.due_date,
            invoice_date=terms.invoice_date,
        )
        factoring = engine.factoring_amount(terms.invoice_amount, terms.factoring_fee)
        discount = engine.discount_amount(terms.discount_fee, tenure, late, advanced)
        fees = engine.total_fees(factoring, discount, terms.additional_fee, terms.bank_charges_fee)
        received = engine.total_amount_received(
            settlement.buyer_amount_received,
            settlement.supplier_amount_received,
        )

        return cls(
            asset_number=record.asset_number,
            invoice_tenure=engine.invoice_tenure(terms.due_date, terms.invoice_date),
            late_days=late,
            finance_tenure=tenure,
            advanced_amount=advanced,
            reserve_amount=engine.reserve_amount(terms.invoice_amount, advanced),
            factoring_amount=factoring,
            discount_amount=discount,
            late_amount=engine.late_amount(terms.late_fee, late, advanced),
            total_fees=fees,
            total_amount_received=received,
            net_amount_payable_to_client=engine.net_amount_payable_to_client(received, advanced, fees),
            short_excess_payment_received=engine.short_excess_payment_received(
                received, terms.invoice_amount
            ),
        )
