"""View models for service outputs."""

from cryptofolio.domain.views.portfolio import (
    Quote,
    AssetWithValue,
    ExchangeWithAssets,
    ExchangeAllocation,
    AssetAllocation,
    PortfolioSummary,
    ValuationResult,
)
from cryptofolio.domain.views.coins import CoinInfo
from cryptofolio.domain.views.events import (
    AssetAdded,
    AssetUpdated,
    AssetDeleted,
    PortfolioRefreshed,
    SettingsUpdated,
)

__all__ = [
    "CoinInfo",
    "Quote",
    "AssetWithValue",
    "ExchangeWithAssets",
    "ExchangeAllocation",
    "AssetAllocation",
    "PortfolioSummary",
    "ValuationResult",
    "AssetAdded",
    "AssetUpdated",
    "AssetDeleted",
    "PortfolioRefreshed",
    "SettingsUpdated",
]
