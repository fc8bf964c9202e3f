"""
Pydantic schemas for API request/response validation.

These schemas define the contract between clients and the backend.
All monetary values and rates are integers in hundredths (850 = 8.50) and
are validated strictly, so a JSON float is rejected instead of rounded.
"""

from datetime import date
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, Field

from tokenfactor.domain.models import AssetFigures, AssetRecord, InitialTerms
from tokenfactor.services.exchange import Trade

Scaled = Annotated[int, Field(ge=0, strict=True)]
AssetNumber = Annotated[int, Field(ge=0, strict=True, description="Asset number / token id")]


class AssetStatusEnum(str, Enum):
    """Asset lifecycle status for API responses."""
    OPEN = "open"
    SETTLED = "settled"


# =============================================================================
# Request Schemas
# =============================================================================

class InitialTermsPayload(BaseModel):
    """Origination terms of an invoice. Rates and amounts in hundredths."""
    factoring_fee: Scaled
    discount_fee: Scaled
    late_fee: Scaled
    bank_charges_fee: Scaled
    additional_fee: Scaled = 0
    grace_period: Annotated[int, Field(ge=0, strict=True, description="Grace period in days")]
    advance_ratio: Scaled
    due_date: date
    invoice_date: date
    funds_advanced_date: date
    invoice_amount: Scaled
    invoice_limit: Scaled

    def to_domain(self) -> InitialTerms:
        return InitialTerms(**self.model_dump())

    @classmethod
    def from_domain(cls, terms: InitialTerms) -> "InitialTermsPayload":
        return cls(**{name: getattr(terms, name) for name in cls.model_fields})


class CreateAssetRequest(BaseModel):
    """Request to create an asset and mint it to a recipient."""
    recipient: str = Field(..., description="Identity receiving the asset token")
    asset_number: AssetNumber
    initial_terms: InitialTermsPayload


class SettlementTermsRequest(BaseModel):
    """Settlement inputs; each request replaces the previous values."""
    buyer_amount_received: Scaled = 0
    supplier_amount_received: Scaled = 0
    payment_receipt_date: date | None = None


class SettleRequest(BaseModel):
    """Closing data of an asset."""
    supplier_amount_reserved: Scaled
    reserve_payment_transaction_id: str = Field(..., min_length=1)
    payment_reserve_date: date | None = None


class BuyRequest(BaseModel):
    """Purchase of a single asset by the calling identity."""
    asset_number: AssetNumber


class BatchBuyRequest(BaseModel):
    """All-or-nothing purchase of several assets by the calling identity."""
    asset_numbers: list[AssetNumber] = Field(..., min_length=1)


class TokenApprovalRequest(BaseModel):
    """Single-token approval; null clears it."""
    approved: str | None = None


class OperatorApprovalRequest(BaseModel):
    """Grant or revoke an operator over all of the caller's tokens."""
    approved: bool


class AllowanceRequest(BaseModel):
    """Amount a spender may move out of the caller's balance (replaces the old one)."""
    amount: Scaled


class FundRequest(BaseModel):
    """Settlement currency issued to a holder."""
    amount: Scaled


class TransferRequest(BaseModel):
    """Settlement currency sent by the caller."""
    recipient: str
    amount: Scaled


class BaseUriRequest(BaseModel):
    base_uri: str


class AdministratorRequest(BaseModel):
    administrator: str


# =============================================================================
# Response Schemas
# =============================================================================

class SettlementTermsResponse(BaseModel):
    """Current settlement data of an asset."""
    payment_receipt_date: date | None = None
    buyer_amount_received: int = 0
    supplier_amount_received: int = 0
    payment_reserve_date: date | None = None
    supplier_amount_reserved: int = 0
    reserve_payment_transaction_id: str | None = None


class AssetResponse(BaseModel):
    """An asset record with its current holder."""
    asset_number: int
    owner: str
    status: AssetStatusEnum
    settled: bool
    initial_terms: InitialTermsPayload
    settlement_terms: SettlementTermsResponse

    @classmethod
    def from_record(cls, record: AssetRecord, owner: str) -> "AssetResponse":
        settlement = record.settlement_terms
        return cls(
            asset_number=record.asset_number,
            owner=owner,
            status=AssetStatusEnum(record.status.value),
            settled=record.settled,
            initial_terms=InitialTermsPayload.from_domain(record.initial_terms),
            settlement_terms=SettlementTermsResponse(
                payment_receipt_date=settlement.payment_receipt_date,
                buyer_amount_received=settlement.buyer_amount_received,
                supplier_amount_received=settlement.supplier_amount_received,
                payment_reserve_date=settlement.payment_reserve_date,
                supplier_amount_reserved=settlement.supplier_amount_reserved,
                reserve_payment_transaction_id=settlement.reserve_payment_transaction_id,
            ),
        )


class FiguresResponse(BaseModel):
    """Derived figures of an asset. Amounts in hundredths, tenures in days."""
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
    def from_figures(cls, figures: AssetFigures) -> "FiguresResponse":
        return cls(**{name: getattr(figures, name) for name in cls.model_fields})


class TokenUriResponse(BaseModel):
    asset_number: int
    uri: str


class TradeResponse(BaseModel):
    """A completed asset purchase."""
    asset_number: int
    seller: str
    buyer: str
    price: int

    @classmethod
    def from_trade(cls, trade: Trade) -> "TradeResponse":
        return cls(
            asset_number=trade.asset_number,
            seller=trade.seller,
            buyer=trade.buyer,
            price=trade.price,
        )


class BatchTradeResponse(BaseModel):
    trades: list[TradeResponse]
    total_price: int


class DisburseResponse(BaseModel):
    """Amount payable to the client; negative means the client owes it back."""
    asset_number: int
    net_amount_payable_to_client: int


class TokenResponse(BaseModel):
    """Ownership entry of one asset token."""
    token_id: int
    owner: str
    approved: str | None = None


class SupplyResponse(BaseModel):
    total_supply: int


class TokenIndexResponse(BaseModel):
    index: int
    token_id: int


class HolderTokensResponse(BaseModel):
    """Tokens of one holder in acquisition order."""
    owner: str
    balance: int
    tokens: list[int]


class OperatorApprovalResponse(BaseModel):
    owner: str
    operator: str
    approved: bool


class BalanceResponse(BaseModel):
    """Settlement currency balance in hundredths."""
    holder: str
    amount: int


class AllowanceResponse(BaseModel):
    owner: str
    spender: str
    amount: int


class RegistryInfoResponse(BaseModel):
    """Administrative configuration of the asset registry."""
    administrator: str
    base_uri: str
    collection_name: str
    collection_symbol: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str
    database: str = "connected"
    collection: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: str | None = None
    code: str | None = None
