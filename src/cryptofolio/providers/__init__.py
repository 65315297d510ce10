"""Quote source adapters."""

from cryptofolio.providers.quote_source import CoinDirectory, QuoteSource
from cryptofolio.providers.coin_search import search_coins
from cryptofolio.providers.stub_provider import StubQuoteSource
from cryptofolio.providers.coingecko_provider import CoinGeckoQuoteSource, CoinListCache

__all__ = [
    "CoinDirectory",
    "QuoteSource",
    "search_coins",
    "StubQuoteSource",
    "CoinGeckoQuoteSource",
    "CoinListCache",
]
