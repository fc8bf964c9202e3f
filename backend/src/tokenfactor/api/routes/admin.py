"""
Registry administration endpoints.

The registry checks the caller itself, so a non-administrator gets 403.
"""

import logging

from fastapi import APIRouter

from tokenfactor.api.dependencies import CallerDep, ServicesDep
from tokenfactor.api.schemas import AdministratorRequest, BaseUriRequest, RegistryInfoResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _registry_info(services: ServicesDep) -> RegistryInfoResponse:
    registry = services.registry
    return RegistryInfoResponse(
        administrator=registry.administrator,
        base_uri=registry.base_uri,
        collection_name=registry.collection.name,
        collection_symbol=registry.collection.symbol,
    )


@router.get("", response_model=RegistryInfoResponse)
def get_registry_info(services: ServicesDep) -> RegistryInfoResponse:
    return _registry_info(services)


@router.put(
    "/base-uri",
    response_model=RegistryInfoResponse,
    responses={403: {"description": "Caller is not the administrator"}},
)
def set_base_uri(request: BaseUriRequest, caller: CallerDep, services: ServicesDep) -> RegistryInfoResponse:
    """Replace the prefix of every token URI."""
    services.registry.set_base_uri(caller, request.base_uri)
    return _registry_info(services)


@router.put(
    "/administrator",
    response_model=RegistryInfoResponse,
    responses={
        403: {"description": "Caller is not the administrator"},
        422: {"description": "Empty administrator identity"},
    },
)
def transfer_administration(
    request: AdministratorRequest,
    caller: CallerDep,
    services: ServicesDep,
) -> RegistryInfoResponse:
    """Hand the administrator role to another identity."""
    logger.info(f"Administration transfer to {request.administrator} requested by {caller}")
    services.registry.transfer_administration(caller, request.administrator)
    return _registry_info(services)
