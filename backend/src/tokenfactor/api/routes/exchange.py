"""
Exchange endpoints.

The calling identity (``X-Identity``) is the buyer. Allowances and token
approvals must already be in place on the ledgers.
"""

import logging

from fastapi import APIRouter

from tokenfactor.api.dependencies import AssetNumberPath, CallerDep, ServicesDep
from tokenfactor.api.schemas import (
    BatchBuyRequest,
    BatchTradeResponse,
    BuyRequest,
    DisburseResponse,
    TradeResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/exchange", tags=["exchange"])

_TRADE_ERRORS = {
    402: {"description": "Insufficient allowance or balance"},
    403: {"description": "Holder has not approved the transfer"},
    404: {"description": "Asset not listed"},
    422: {"description": "Buyer cannot receive asset tokens"},
}


@router.post("/buy", response_model=TradeResponse, responses=_TRADE_ERRORS)
def buy(request: BuyRequest, caller: CallerDep, services: ServicesDep) -> TradeResponse:
    """Buy one asset for its reserve amount."""
    trade = services.exchange.buy(request.asset_number, caller)
    return TradeResponse.from_trade(trade)


@router.post("/batch-buy", response_model=BatchTradeResponse, responses=_TRADE_ERRORS)
def batch_buy(request: BatchBuyRequest, caller: CallerDep, services: ServicesDep) -> BatchTradeResponse:
    """Buy several assets at once; nothing is transferred unless all succeed."""
    trades = services.exchange.batch_buy(request.asset_numbers, caller)
    return BatchTradeResponse(
        trades=[TradeResponse.from_trade(trade) for trade in trades],
        total_price=sum(trade.price for trade in trades),
    )


@router.get("/disburse/{asset_number}", response_model=DisburseResponse)
def disburse(asset_number: AssetNumberPath, services: ServicesDep) -> DisburseResponse:
    return DisburseResponse(
        asset_number=asset_number,
        net_amount_payable_to_client=services.exchange.disburse(asset_number),
    )
