"""Asset domain model and symbol rules."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

# Symbols pinned to 1.0 by domain rule, never priced by the market
STABLECOINS = frozenset(
    {"usdt", "usdc", "dai", "busd", "tusd", "usdp", "usdd", "gusd", "frax", "lusd", "susd"}
)


def is_stablecoin(symbol: str) -> bool:
    """Return True if the symbol belongs to a known stablecoin."""
    return symbol.strip().lower() in STABLECOINS


def normalize_symbol(symbol: Optional[str]) -> Optional[str]:
    """Strip whitespace and uppercase; None or empty -> None."""
    if symbol is None:
        return None
    stripped = symbol.strip().upper()
    return stripped if stripped else None


def to_decimal(value: Union[str, int, float, Decimal, None]) -> Optional[Decimal]:
    """
    Convert a numeric string (or number) to Decimal.

    Floats go through str() so 0.1 stays 0.1. Returns None for None;
    raises InvalidOperation for non-numeric input.
    """
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    result = Decimal(str(value).strip())
    if not result.is_finite():
        raise InvalidOperation(f"Not a finite number: {value!r}")
    return result


@dataclass
class Asset:
    """
    One held symbol within an exchange.

    quantity and purchase_price_avg are persisted as exact numeric strings
    and exposed as Decimal.
    """

    id: str
    exchange_id: str
    symbol: str
    quantity: Decimal
    purchase_price_avg: Decimal
    last_updated: Optional[datetime] = field(default=None)
    logo_url: Optional[str] = None

    def __post_init__(self) -> None:
        self.symbol = normalize_symbol(self.symbol) or self.symbol
        self.quantity = to_decimal(self.quantity)
        self.purchase_price_avg = to_decimal(self.purchase_price_avg)

    @property
    def investment(self) -> Decimal:
        """Cost basis of the holding."""
        return self.quantity * self.purchase_price_avg


@dataclass
class AssetCreate:
    """Input data for creating an asset."""

    exchange_id: str
    symbol: str
    quantity: Union[str, Decimal]
    purchase_price_avg: Union[str, Decimal]
    logo_url: Optional[str] = None


@dataclass
class AssetUpdate:
    """Partial update data for editing an asset."""

    exchange_id: Optional[str] = None
    symbol: Optional[str] = None
    quantity: Optional[Union[str, Decimal]] = None
    purchase_price_avg: Optional[Union[str, Decimal]] = None
    logo_url: Optional[str] = None
