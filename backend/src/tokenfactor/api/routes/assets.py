"""
Asset endpoints.

Creation and settlement writes are restricted to the administrator; reads
are open. Domain errors are translated to HTTP responses by the handler
registered in ``tokenfactor.main``.
"""

import logging

from fastapi import APIRouter, status

from tokenfactor.api.dependencies import AssetNumberPath, CallerDep, ServicesDep
from tokenfactor.api.schemas import (
    AssetResponse,
    CreateAssetRequest,
    FiguresResponse,
    SettleRequest,
    SettlementTermsRequest,
    TokenUriResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assets", tags=["assets"])


def _asset_response(services: ServicesDep, asset_number: int) -> AssetResponse:
    record = services.registry.get_asset(asset_number)
    return AssetResponse.from_record(record, owner=services.registry.owner_of(asset_number))


@router.post(
    "",
    response_model=AssetResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"description": "Caller is not the administrator"},
        409: {"description": "Asset number already exists"},
        422: {"description": "Invalid terms, tenure too short or empty recipient"},
    },
)
def create_asset(
    request: CreateAssetRequest,
    caller: CallerDep,
    services: ServicesDep,
) -> AssetResponse:
    """Create an asset from its origination terms and mint it to the recipient."""
    logger.info(f"Create asset {request.asset_number} for {request.recipient} requested by {caller}")
    services.registry.create_asset(
        caller,
        request.recipient,
        request.asset_number,
        request.initial_terms.to_domain(),
    )
    return _asset_response(services, request.asset_number)


@router.get("/{asset_number}", response_model=AssetResponse)
def get_asset(asset_number: AssetNumberPath, services: ServicesDep) -> AssetResponse:
    return _asset_response(services, asset_number)


@router.get("/{asset_number}/figures", response_model=FiguresResponse)
def get_figures(asset_number: AssetNumberPath, services: ServicesDep) -> FiguresResponse:
    """Every derived figure of the asset from its current terms."""
    return FiguresResponse.from_figures(services.registry.figures(asset_number))


@router.get("/{asset_number}/uri", response_model=TokenUriResponse)
def get_token_uri(asset_number: AssetNumberPath, services: ServicesDep) -> TokenUriResponse:
    return TokenUriResponse(asset_number=asset_number, uri=services.registry.token_uri(asset_number))


@router.put(
    "/{asset_number}/settlement",
    response_model=AssetResponse,
    responses={
        403: {"description": "Caller is not the administrator"},
        404: {"description": "Asset not found"},
        409: {"description": "Asset already settled"},
    },
)
def set_settlement_terms(
    asset_number: AssetNumberPath,
    request: SettlementTermsRequest,
    caller: CallerDep,
    services: ServicesDep,
) -> AssetResponse:
    """Replace the settlement inputs of an open asset."""
    services.registry.set_additional_metadata(
        caller,
        asset_number,
        request.buyer_amount_received,
        request.supplier_amount_received,
        request.payment_receipt_date,
    )
    return _asset_response(services, asset_number)


@router.post(
    "/{asset_number}/settle",
    response_model=AssetResponse,
    responses={
        403: {"description": "Caller is not the administrator"},
        404: {"description": "Asset not found"},
        409: {"description": "Asset already settled"},
    },
)
def settle_asset(
    asset_number: AssetNumberPath,
    request: SettleRequest,
    caller: CallerDep,
    services: ServicesDep,
) -> AssetResponse:
    """Close the asset. Irreversible."""
    services.registry.set_asset_settled_metadata(
        caller,
        asset_number,
        request.supplier_amount_reserved,
        request.reserve_payment_transaction_id,
        request.payment_reserve_date,
    )
    return _asset_response(services, asset_number)
