"""Event bus payloads."""

from dataclasses import dataclass, field
from decimal import Decimal

from cryptofolio.domain.models import Asset
from cryptofolio.domain.views.portfolio import ExchangeWithAssets


@dataclass
class AssetAdded:
    asset: Asset


@dataclass
class AssetUpdated:
    asset: Asset
    exchange_id: str
    portfolio_snapshot: list[ExchangeWithAssets] = field(default_factory=list)


@dataclass
class AssetDeleted:
    asset_id: str


@dataclass
class PortfolioRefreshed:
    portfolio_snapshot: list[ExchangeWithAssets] = field(default_factory=list)


@dataclass
class SettingsUpdated:
    initial_capital: Decimal
