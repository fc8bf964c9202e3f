"""
Exchange: trade assets against payment of their reserve amount.

A buyer pays the current holder the asset's reserve amount in settlement
currency and receives the asset token in return. Both legs run inside one
transaction, and a batch runs all of its trades inside one transaction, so a
failure anywhere leaves both ledgers exactly as they were.

Before trading, the buyer approves the exchange identity on the value ledger
for at least the reserve amount, and the holder approves either the exchange
identity or the buyer on the ownership ledger.
"""

import logging
from dataclasses import dataclass
from typing import Iterable

from tokenfactor.exceptions import InvalidAsset, InvalidRecipient, NotAuthorized
from tokenfactor.infrastructure.database import Database
from tokenfactor.ports import OwnershipLedger, ValueLedger

from .registry import AssetRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Trade:
    """Completed purchase of one asset."""
    asset_number: int
    seller: str
    buyer: str
    price: int  # reserve amount paid, in hundredths


class Exchange:
    """
    Single and batch asset purchases plus the disbursement figure.

    Args:
        database: Shared database providing the transaction boundary
        registry: Asset registry the traded assets belong to
        value: Settlement-currency ledger
        identity: Identity the exchange spends allowances and moves tokens as
    """

    def __init__(
        self,
        database: Database,
        registry: AssetRegistry,
        value: ValueLedger,
        identity: str = "exchange",
    ) -> None:
        self.database = database
        self.registry = registry
        self.value = value
        self.identity = identity

    @property
    def ownership(self) -> OwnershipLedger:
        return self.registry.ownership

    def _require_asset(self, asset_number: int) -> None:
        if not self.registry.store.exists(asset_number) or not self.ownership.exists(asset_number):
            raise InvalidAsset(f"Asset {asset_number} is not listed")

    def _trade(self, asset_number: int, buyer: str) -> Trade:
        self._require_asset(asset_number)
        seller = self.ownership.owner_of(asset_number)
        if seller == buyer:
            raise InvalidRecipient(f"{buyer} already holds asset {asset_number}")
        price = self.registry.calculate_reserve_amount(asset_number)

        # Payment first: its failures take precedence over a missing holder approval
        self.value.transfer_from(buyer, self.identity, seller, price)

        if self.ownership.is_approved_or_owner(asset_number, self.identity):
            operator = self.identity
        elif self.ownership.is_approved_or_owner(asset_number, buyer):
            operator = buyer
        else:
            raise NotAuthorized(
                f"Holder {seller} has not approved the exchange or {buyer} for asset {asset_number}"
            )

        self.ownership.safe_transfer(asset_number, seller, buyer, operator=operator)
        return Trade(asset_number=asset_number, seller=seller, buyer=buyer, price=price)

    def buy(self, asset_number: int, buyer: str) -> Trade:
        """
        Buy one asset for its reserve amount.

        Raises:
            InvalidAsset: asset unknown to the registry
            InvalidRecipient: buyer already holds the asset
            InsufficientAllowance, InsufficientBalance: payment leg failed
            NotAuthorized: holder approved neither the exchange nor the buyer
            TransferRejected: buyer cannot receive asset tokens
        """
        try:
            with self.database.transaction():
                trade = self._trade(asset_number, buyer)
        except Exception as e:
            logger.warning(f"Purchase of asset {asset_number} by {buyer} failed: {type(e).__name__}: {e}")
            raise

        logger.info(f"Asset {asset_number} sold by {trade.seller} to {buyer} for {trade.price}")
        return trade

    def batch_buy(self, asset_numbers: Iterable[int], buyer: str) -> list[Trade]:
        """
        Buy several assets in order, all or nothing.

        The first failing purchase aborts the batch and every purchase made
        earlier in the same batch is rolled back.
        """
        asset_numbers = list(asset_numbers)
        try:
            with self.database.transaction():
                trades = [self._trade(asset_number, buyer) for asset_number in asset_numbers]
        except Exception as e:
            logger.warning(
                f"Batch purchase of {len(asset_numbers)} assets by {buyer} rolled back: "
                f"{type(e).__name__}: {e}"
            )
            raise

        logger.info(f"Batch of {len(trades)} assets sold to {buyer}")
        return trades

    def disburse(self, asset_number: int) -> int:
        """
        Net amount payable to the client, in hundredths.

        Read only: moving the funds happens outside the exchange.
        """
        self._require_asset(asset_number)
        return self.registry.calculate_net_amount_payable_to_client(asset_number)
