"""
Asset registry: the administrative front door to asset records and tokens.

Binds asset creation to token minting so a record never exists without its
ownership entry (or the reverse), and gates every mutation behind the
administrator identity passed in by the caller.
"""

import logging
from dataclasses import dataclass
from datetime import date

from tokenfactor.domain.models import AssetFigures, AssetRecord, InitialTerms
from tokenfactor.exceptions import InvalidRecipient, NotAuthorized
from tokenfactor.infrastructure.database import Database
from tokenfactor.ports import OwnershipLedger

from .asset_store import AssetStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollectionInfo:
    """Public description of the asset token collection."""
    name: str
    symbol: str


class AssetRegistry:
    """
    Facade over the asset store and the ownership ledger.

    Example:
        registry = AssetRegistry(db, store, ownership, administrator="admin")
        registry.create_asset("admin", "supplier-1", 7, terms)
        registry.set_additional_metadata("admin", 7, 1_100_000, 0, date(2023, 2, 10))
        registry.set_asset_settled_metadata("admin", 7, 320_000, "tx-42", date(2023, 2, 12))
    """

    def __init__(
        self,
        database: Database,
        store: AssetStore,
        ownership: OwnershipLedger,
        administrator: str,
        collection: CollectionInfo = CollectionInfo(name="Polytrade", symbol="TRADE"),
        base_uri: str = "",
    ) -> None:
        if not administrator:
            raise InvalidRecipient("Administrator identity must not be empty")
        self.database = database
        self.store = store
        self.ownership = ownership
        self.collection = collection
        self._administrator = administrator
        self._base_uri = base_uri

    @property
    def administrator(self) -> str:
        return self._administrator

    @property
    def base_uri(self) -> str:
        return self._base_uri

    def _require_admin(self, caller: str, action: str) -> None:
        if caller != self._administrator:
            logger.warning(f"Rejected {action} by non-administrator {caller!r}")
            raise NotAuthorized(f"{caller!r} is not the administrator")

    # Mutations

    def create_asset(
        self,
        caller: str,
        recipient: str,
        asset_number: int,
        initial_terms: InitialTerms,
    ) -> AssetRecord:
        """
        Create an asset record and mint its token to ``recipient``.

        Both writes happen in one transaction: if the mint is rejected the
        record insertion is rolled back.

        Raises:
            NotAuthorized: caller is not the administrator
            InvalidRecipient: recipient is empty
            AlreadyExists, TenureTooShort: from the store or the ledger
        """
        self._require_admin(caller, "create_asset")
        if not recipient or not recipient.strip():
            raise InvalidRecipient("Cannot mint an asset to an empty identity")

        with self.database.transaction():
            record = self.store.create(asset_number, initial_terms)
            self.ownership.mint(asset_number, recipient)

        logger.info(f"Asset {asset_number} minted to {recipient}")
        return record

    def set_additional_metadata(
        self,
        caller: str,
        asset_number: int,
        buyer_amount_received: int,
        supplier_amount_received: int,
        payment_receipt_date: date | int | None,
    ) -> AssetRecord:
        """Record settlement inputs received so far (replaces earlier ones)."""
        self._require_admin(caller, "set_additional_metadata")
        return self.store.set_settlement_terms(
            asset_number,
            buyer_amount_received,
            supplier_amount_received,
            payment_receipt_date,
        )

    def set_asset_settled_metadata(
        self,
        caller: str,
        asset_number: int,
        supplier_amount_reserved: int,
        reserve_payment_transaction_id: str,
        payment_reserve_date: date | int | None,
    ) -> AssetRecord:
        """Close the asset with its reserve payment details."""
        self._require_admin(caller, "set_asset_settled_metadata")
        return self.store.settle(
            asset_number,
            supplier_amount_reserved,
            reserve_payment_transaction_id,
            payment_reserve_date,
        )

    def set_base_uri(self, caller: str, base_uri: str) -> None:
        self._require_admin(caller, "set_base_uri")
        self._base_uri = base_uri
        logger.info(f"Base URI set to {base_uri}")

    def set_formulas(self, caller: str, engine) -> None:
        """Swap the formula engine used for every derived figure."""
        self._require_admin(caller, "set_formulas")
        self.store.formulas = engine
        logger.info(f"Formula engine set to {getattr(engine, '__name__', type(engine).__name__)}")

    def transfer_administration(self, caller: str, new_administrator: str) -> None:
        self._require_admin(caller, "transfer_administration")
        if not new_administrator or not new_administrator.strip():
            raise InvalidRecipient("Administrator identity must not be empty")
        self._administrator = new_administrator
        logger.info(f"Administration transferred from {caller} to {new_administrator}")

    # Reads

    def get_asset(self, asset_number: int) -> AssetRecord:
        return self.store.get(asset_number)

    def figures(self, asset_number: int) -> AssetFigures:
        return self.store.figures(asset_number)

    def token_uri(self, asset_number: int) -> str:
        """Metadata URI of an asset: base URI followed by the asset number."""
        self.store.get(asset_number)
        if not self._base_uri:
            return ""
        return f"{self._base_uri}{asset_number}"

    def owner_of(self, asset_number: int) -> str:
        return self.ownership.owner_of(asset_number)

    def balance_of(self, owner: str) -> int:
        return self.ownership.balance_of(owner)

    def total_supply(self) -> int:
        return self.ownership.total_supply()

    def token_by_index(self, index: int) -> int:
        return self.ownership.token_by_index(index)

    def token_of_owner_by_index(self, owner: str, index: int) -> int:
        return self.ownership.token_of_owner_by_index(owner, index)

    def calculate_reserve_amount(self, asset_number: int) -> int:
        return self.store.calculate_reserve_amount(asset_number)

    def calculate_net_amount_payable_to_client(self, asset_number: int) -> int:
        return self.store.calculate_net_amount_payable_to_client(asset_number)
