"""Quote source protocol."""

from typing import Protocol

from cryptofolio.domain.views import CoinInfo, Quote


class QuoteSource(Protocol):
    """
    Protocol for market data providers.

    Implementations fetch current prices for a batch of symbols. They hold
    no cache; caching belongs to PriceCache.
    """

    async def fetch_batch(self, symbols: list[str]) -> dict[str, Quote]:
        """
        Fetch quotes for multiple symbols in one round-trip.

        Returns dict mapping upper-case symbol -> Quote.
        Symbols that cannot be priced are omitted from the result; an unknown
        symbol never fails the whole batch.
        """
        ...


class CoinDirectory(Protocol):
    """Lookup of listed coins, used to resolve a ticker and logo when adding an asset."""

    async def search_coins(self, term: str) -> list[CoinInfo]:
        """Coins whose ticker or name contains term, best match first; [] for a blank term."""
        ...
