"""
Service wiring for the API.

Builds the store, ledgers, registry and exchange over one database and
hands them to routes through FastAPI dependencies.
"""

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Path, Request, status

from tokenfactor.config import Settings, get_settings
from tokenfactor.exceptions import NotAuthorized
from tokenfactor.infrastructure.database import Database, init_db
from tokenfactor.infrastructure.ledgers import SqlOwnershipLedger, SqlValueLedger
from tokenfactor.services.asset_store import AssetStore
from tokenfactor.services.exchange import Exchange
from tokenfactor.services.registry import AssetRegistry, CollectionInfo

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything the routes need, sharing one database."""
    database: Database
    store: AssetStore
    ownership: SqlOwnershipLedger
    value: SqlValueLedger
    registry: AssetRegistry
    exchange: Exchange


def build_services(settings: Settings, database: Database) -> Services:
    """Wire the components for ``settings`` on top of ``database``."""
    store = AssetStore(database)
    ownership = SqlOwnershipLedger(database)
    value = SqlValueLedger(database)
    registry = AssetRegistry(
        database,
        store,
        ownership,
        administrator=settings.administrator,
        collection=CollectionInfo(name=settings.nft_name, symbol=settings.nft_symbol),
        base_uri=settings.nft_base_uri,
    )
    exchange = Exchange(database, registry, value, identity=settings.exchange_identity)
    return Services(
        database=database,
        store=store,
        ownership=ownership,
        value=value,
        registry=registry,
        exchange=exchange,
    )


def default_services() -> Services:
    """Services over the configured database, creating its tables."""
    return build_services(get_settings(), init_db())


def get_services(request: Request) -> Services:
    """Services attached to the app, built from settings on first use."""
    services = getattr(request.app.state, "services", None)
    if services is None:
        services = request.app.state.services = default_services()
    return services


def get_caller(
    x_identity: Annotated[str | None, Header(description="Identity of the calling party")] = None,
) -> str:
    """Calling identity, taken from the ``X-Identity`` header."""
    if not x_identity:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Identity header",
        )
    return x_identity


ServicesDep = Annotated[Services, Depends(get_services)]
CallerDep = Annotated[str, Depends(get_caller)]
AssetNumberPath = Annotated[int, Path(ge=0, description="Asset number / token id")]
TokenIndexPath = Annotated[int, Path(ge=0, description="Zero-based enumeration index")]


def get_administrator(caller: CallerDep, services: ServicesDep) -> str:
    """The caller, provided it is the registry administrator."""
    if caller != services.registry.administrator:
        logger.warning(f"Rejected administrative request by {caller!r}")
        raise NotAuthorized(f"{caller!r} is not the administrator")
    return caller


AdministratorDep = Annotated[str, Depends(get_administrator)]
