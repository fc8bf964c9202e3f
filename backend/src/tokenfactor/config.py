"""
Application configuration loaded from environment variables.

All configuration is validated at startup to fail fast on misconfiguration.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with validation.

    All settings are loaded from environment variables with the same name.
    Use .env file for local development.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_url: str = Field(
        default="sqlite+pysqlite:///:memory:",
        description="SQLAlchemy URL of the asset and ledger tables",
    )

    # Identities
    administrator: str = Field(
        default="admin",
        min_length=1,
        description="Identity allowed to create assets and record settlement data",
    )
    exchange_identity: str = Field(
        default="exchange",
        min_length=1,
        description="Identity the exchange uses as spender and token operator",
    )

    # Asset collection
    nft_name: str = Field(default="Polytrade", description="Asset collection name")
    nft_symbol: str = Field(default="TRADE", description="Asset collection symbol")
    nft_base_uri: str = Field(
        default="https://ipfs.io/ipfs/",
        description="Prefix of every asset metadata URI",
    )

    # Settlement currency
    token_name: str = Field(default="StableToken", description="Settlement currency name")
    token_symbol: str = Field(default="USDT", description="Settlement currency symbol")

    # Server
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Root log level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with detailed error messages and SQL echo",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once at startup and cached for subsequent calls.
    This ensures consistent configuration across the application lifecycle.
    """
    return Settings()
