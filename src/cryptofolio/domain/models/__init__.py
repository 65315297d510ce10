"""Domain models package."""

from cryptofolio.domain.models.enums import LoadState, Topic
from cryptofolio.domain.models.exchange import Exchange, ExchangeCreate, ExchangeUpdate
from cryptofolio.domain.models.asset import (
    Asset,
    AssetCreate,
    AssetUpdate,
    STABLECOINS,
    is_stablecoin,
    normalize_symbol,
    to_decimal,
)
from cryptofolio.domain.models.settings import UserSettings

__all__ = [
    "LoadState",
    "Topic",
    "Exchange",
    "ExchangeCreate",
    "ExchangeUpdate",
    "Asset",
    "AssetCreate",
    "AssetUpdate",
    "STABLECOINS",
    "is_stablecoin",
    "normalize_symbol",
    "to_decimal",
    "UserSettings",
]
