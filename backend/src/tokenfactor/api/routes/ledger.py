"""
Ledger endpoints.

Token approvals, operator approvals, currency allowances and transfers act
for the calling identity (``X-Identity``). Issuing currency is restricted to
the administrator. Enumeration reads are open.
"""

import logging

from fastapi import APIRouter, status

from tokenfactor.api.dependencies import (
    AdministratorDep,
    AssetNumberPath,
    CallerDep,
    ServicesDep,
    TokenIndexPath,
)
from tokenfactor.api.schemas import (
    AllowanceRequest,
    AllowanceResponse,
    BalanceResponse,
    FundRequest,
    HolderTokensResponse,
    OperatorApprovalRequest,
    OperatorApprovalResponse,
    SupplyResponse,
    TokenApprovalRequest,
    TokenIndexResponse,
    TokenResponse,
    TransferRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ledger", tags=["ledger"])


def _token_response(services: ServicesDep, token_id: int) -> TokenResponse:
    return TokenResponse(
        token_id=token_id,
        owner=services.ownership.owner_of(token_id),
        approved=services.ownership.get_approved(token_id),
    )


# =============================================================================
# Asset tokens
# =============================================================================

@router.get("/tokens", response_model=SupplyResponse)
def total_supply(services: ServicesDep) -> SupplyResponse:
    return SupplyResponse(total_supply=services.registry.total_supply())


@router.get("/tokens/by-index/{index}", response_model=TokenIndexResponse)
def token_by_index(index: TokenIndexPath, services: ServicesDep) -> TokenIndexResponse:
    """Token at ``index`` in mint order."""
    return TokenIndexResponse(index=index, token_id=services.registry.token_by_index(index))


@router.get("/tokens/{token_id}", response_model=TokenResponse)
def get_token(token_id: AssetNumberPath, services: ServicesDep) -> TokenResponse:
    return _token_response(services, token_id)


@router.put(
    "/tokens/{token_id}/approval",
    response_model=TokenResponse,
    responses={
        403: {"description": "Caller is neither holder nor operator"},
        404: {"description": "Token not found"},
    },
)
def approve_token(
    token_id: AssetNumberPath,
    request: TokenApprovalRequest,
    caller: CallerDep,
    services: ServicesDep,
) -> TokenResponse:
    """Let one identity move this token; null clears the approval."""
    services.ownership.approve(token_id, request.approved, caller=caller)
    logger.info(f"Token {token_id} approval set to {request.approved} by {caller}")
    return _token_response(services, token_id)


@router.get("/holders/{owner}/tokens", response_model=HolderTokensResponse)
def holder_tokens(owner: str, services: ServicesDep) -> HolderTokensResponse:
    """Every token of ``owner``, in the order they were acquired."""
    balance = services.registry.balance_of(owner)
    return HolderTokensResponse(
        owner=owner,
        balance=balance,
        tokens=[services.registry.token_of_owner_by_index(owner, i) for i in range(balance)],
    )


@router.get("/holders/{owner}/tokens/{index}", response_model=TokenIndexResponse)
def token_of_owner_by_index(owner: str, index: TokenIndexPath, services: ServicesDep) -> TokenIndexResponse:
    return TokenIndexResponse(index=index, token_id=services.registry.token_of_owner_by_index(owner, index))


@router.put("/operators/{operator}", response_model=OperatorApprovalResponse)
def set_operator(
    operator: str,
    request: OperatorApprovalRequest,
    caller: CallerDep,
    services: ServicesDep,
) -> OperatorApprovalResponse:
    """Grant or revoke ``operator`` control over all of the caller's tokens."""
    services.ownership.set_approval_for_all(caller, operator, request.approved)
    logger.info(f"Operator {operator} {'approved' if request.approved else 'revoked'} by {caller}")
    return OperatorApprovalResponse(owner=caller, operator=operator, approved=request.approved)


@router.get("/operators/{owner}/{operator}", response_model=OperatorApprovalResponse)
def get_operator(owner: str, operator: str, services: ServicesDep) -> OperatorApprovalResponse:
    return OperatorApprovalResponse(
        owner=owner,
        operator=operator,
        approved=services.ownership.is_approved_for_all(owner, operator),
    )


# =============================================================================
# Settlement currency
# =============================================================================

@router.get("/balances/{holder}", response_model=BalanceResponse)
def get_balance(holder: str, services: ServicesDep) -> BalanceResponse:
    return BalanceResponse(holder=holder, amount=services.value.balance_of(holder))


@router.post(
    "/balances/{holder}/fund",
    response_model=BalanceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"description": "Caller is not the administrator"}},
)
def fund(
    holder: str,
    request: FundRequest,
    administrator: AdministratorDep,
    services: ServicesDep,
) -> BalanceResponse:
    """Issue settlement currency to a holder."""
    services.value.mint(holder, request.amount)
    logger.info(f"{administrator} issued {request.amount} to {holder}")
    return BalanceResponse(holder=holder, amount=services.value.balance_of(holder))


@router.post(
    "/transfers",
    response_model=BalanceResponse,
    responses={402: {"description": "Insufficient balance"}},
)
def transfer(request: TransferRequest, caller: CallerDep, services: ServicesDep) -> BalanceResponse:
    """Send settlement currency; returns the caller's remaining balance."""
    services.value.transfer(caller, request.recipient, request.amount)
    return BalanceResponse(holder=caller, amount=services.value.balance_of(caller))


@router.put("/allowances/{spender}", response_model=AllowanceResponse)
def approve_allowance(
    spender: str,
    request: AllowanceRequest,
    caller: CallerDep,
    services: ServicesDep,
) -> AllowanceResponse:
    """Set how much ``spender`` may move out of the caller's balance."""
    services.value.approve(caller, spender, request.amount)
    logger.info(f"Allowance of {spender} over {caller} set to {request.amount}")
    return AllowanceResponse(owner=caller, spender=spender, amount=request.amount)


@router.get("/allowances/{owner}/{spender}", response_model=AllowanceResponse)
def get_allowance(owner: str, spender: str, services: ServicesDep) -> AllowanceResponse:
    return AllowanceResponse(owner=owner, spender=spender, amount=services.value.allowance(owner, spender))
