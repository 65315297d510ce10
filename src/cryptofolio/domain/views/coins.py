"""Coin directory entries used to resolve tickers when adding assets."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CoinInfo:
    """A listed coin: market data id, ticker, display name and logo."""

    id: str
    symbol: str
    name: str
    image_url: Optional[str] = None
