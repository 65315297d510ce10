"""View models for valuation outputs."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from cryptofolio.domain.models import Asset, Exchange


@dataclass
class Quote:
    """Point-in-time price observation for a symbol."""

    symbol: str
    current_price: Decimal
    as_of: datetime
    price_change_percentage_24h: Optional[Decimal] = None
    image_url: Optional[str] = None
    is_stablecoin: bool = False
    is_stale: bool = False


@dataclass
class AssetWithValue(Asset):
    """Asset with derived valuation fields. Recomputed on every pass."""

    current_price: Decimal = field(default_factory=lambda: Decimal("0"))
    current_value: Decimal = field(default_factory=lambda: Decimal("0"))
    profit_loss: Decimal = field(default_factory=lambda: Decimal("0"))
    profit_loss_percentage: Decimal = field(default_factory=lambda: Decimal("0"))
    last_priced_at: Optional[datetime] = None
    is_price_stale: bool = False

    def to_asset(self) -> Asset:
        """Strip derived fields."""
        return Asset(
            id=self.id,
            exchange_id=self.exchange_id,
            symbol=self.symbol,
            quantity=self.quantity,
            purchase_price_avg=self.purchase_price_avg,
            last_updated=self.last_updated,
            logo_url=self.logo_url,
        )


@dataclass
class ExchangeWithAssets(Exchange):
    """Exchange with its valued assets; total_value == sum of asset values."""

    assets: list[AssetWithValue] = field(default_factory=list)
    total_value: Decimal = field(default_factory=lambda: Decimal("0"))


@dataclass
class ExchangeAllocation:
    """Single item in the per-exchange distribution."""

    exchange_id: str
    exchange_name: str
    value: Decimal
    percentage: Decimal


@dataclass
class AssetAllocation:
    """Single item in the per-symbol distribution (aggregated across exchanges)."""

    symbol: str
    value: Decimal
    percentage: Decimal


@dataclass
class PortfolioSummary:
    """Portfolio totals relative to the user's initial capital."""

    total_value: Decimal = field(default_factory=lambda: Decimal("0"))
    total_investment: Decimal = field(default_factory=lambda: Decimal("0"))
    total_profit_loss: Decimal = field(default_factory=lambda: Decimal("0"))
    profit_loss_percentage: Decimal = field(default_factory=lambda: Decimal("0"))
    distribution_by_exchange: list[ExchangeAllocation] = field(default_factory=list)
    distribution_by_asset: list[AssetAllocation] = field(default_factory=list)
    as_of: Optional[datetime] = None


@dataclass
class ValuationResult:
    """Output of one valuation pass."""

    updated_portfolio: list[ExchangeWithAssets]
    summary: PortfolioSummary
