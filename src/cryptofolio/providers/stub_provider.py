"""Stub quote source for offline/testing use."""

import random
from decimal import Decimal
from typing import Optional

from cryptofolio.core.clock import Clock, SystemClock
from cryptofolio.domain.views import CoinInfo, Quote
from cryptofolio.providers.coin_search import PREFERRED_IDS, search_coins


# Deterministic base prices (USD) for common coins
_STUB_PRICES: dict[str, Decimal] = {
    "BTC": Decimal("42000"),
    "ETH": Decimal("2300"),
    "BNB": Decimal("350"),
    "SOL": Decimal("95"),
    "XRP": Decimal("0.5"),
    "ADA": Decimal("0.55"),
    "DOGE": Decimal("0.08"),
    "DOT": Decimal("12"),
    "AVAX": Decimal("30"),
    "MATIC": Decimal("1.2"),
    "LINK": Decimal("15"),
    "UNI": Decimal("7"),
    "LTC": Decimal("80"),
    "ATOM": Decimal("10"),
    "NEAR": Decimal("4"),
    "AAVE": Decimal("90"),
    "MKR": Decimal("1500"),
    "XMR": Decimal("160"),
}

_STUB_IMAGES: dict[str, str] = {
    "BTC": "https://assets.coingecko.com/coins/images/1/large/bitcoin.png",
    "ETH": "https://assets.coingecko.com/coins/images/279/large/ethereum.png",
    "SOL": "https://assets.coingecko.com/coins/images/4128/large/solana.png",
    "USDT": "https://assets.coingecko.com/coins/images/325/large/Tether.png",
    "USDC": "https://assets.coingecko.com/coins/images/6319/large/USD_Coin_icon.png",
}

_STUB_NAMES: dict[str, str] = {
    "BTC": "Bitcoin",
    "ETH": "Ethereum",
    "USDT": "Tether",
    "USDC": "USD Coin",
    "DAI": "Dai",
    "BNB": "BNB",
    "SOL": "Solana",
    "XRP": "XRP",
    "ADA": "Cardano",
    "DOGE": "Dogecoin",
    "DOT": "Polkadot",
    "AVAX": "Avalanche",
    "MATIC": "Polygon",
    "LINK": "Chainlink",
    "UNI": "Uniswap",
    "LTC": "Litecoin",
    "ATOM": "Cosmos Hub",
    "NEAR": "NEAR Protocol",
    "AAVE": "Aave",
    "MKR": "Maker",
    "XMR": "Monero",
}


class StubQuoteSource:
    """
    Stub provider with deterministic prices for offline operation.

    Known symbols are priced from a fixed table; unknown symbols are omitted.
    Coin search runs over a small built-in directory of the same coins.
    With variation_pct > 0 a seeded random walk of +/- variation_pct is
    applied to every quote.
    """

    def __init__(
        self,
        prices: Optional[dict[str, Decimal]] = None,
        variation_pct: Decimal = Decimal("0"),
        seed: int = 42,
        clock: Optional[Clock] = None,
    ):
        self._prices = {k.upper(): v for k, v in (prices or _STUB_PRICES).items()}
        self._variation_pct = variation_pct
        self._rng = random.Random(seed)
        self._clock = clock or SystemClock()
        self.call_count = 0

    async def fetch_batch(self, symbols: list[str]) -> dict[str, Quote]:
        """Return stub quotes for requested symbols."""
        self.call_count += 1
        as_of = self._clock.now()
        result: dict[str, Quote] = {}

        for symbol in symbols:
            upper_symbol = symbol.upper()
            base_price = self._prices.get(upper_symbol)
            if base_price is None:
                continue

            change_pct = Decimal("0")
            if self._variation_pct:
                change_pct = (
                    Decimal(str(self._rng.uniform(-1, 1))) * self._variation_pct
                ).quantize(Decimal("0.0001"))
            price = base_price * (1 + change_pct / 100)

            result[upper_symbol] = Quote(
                symbol=upper_symbol,
                current_price=price,
                as_of=as_of,
                price_change_percentage_24h=change_pct,
                image_url=_STUB_IMAGES.get(upper_symbol),
            )

        return result

    async def search_coins(self, term: str) -> list[CoinInfo]:
        """Search the built-in coin directory by ticker or name."""
        coins = [
            CoinInfo(
                id=PREFERRED_IDS.get(symbol, symbol.lower()),
                symbol=symbol,
                name=name,
                image_url=_STUB_IMAGES.get(symbol),
            )
            for symbol, name in _STUB_NAMES.items()
        ]
        return search_coins(coins, term)
