"""
Services package - Asset lifecycle, registry and exchange.

Includes the asset record store, the administrative registry facade and the
exchange trading assets against their reserve amount.
"""

from .asset_store import AssetStore
from .exchange import Exchange, Trade
from .registry import AssetRegistry, CollectionInfo

__all__ = ["AssetRegistry", "AssetStore", "CollectionInfo", "Exchange", "Trade"]
