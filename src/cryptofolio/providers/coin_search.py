"""Coin directory search shared by the quote sources."""

from typing import Iterable

from cryptofolio.domain.views import CoinInfo

MAX_SEARCH_RESULTS = 10

# Tickers shared by many listed coins; the id users mean
PREFERRED_IDS: dict[str, str] = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "USDT": "tether",
    "USDC": "usd-coin",
    "DAI": "dai",
    "BUSD": "binance-usd",
    "BNB": "binancecoin",
    "SOL": "solana",
    "XRP": "ripple",
    "ADA": "cardano",
    "DOGE": "dogecoin",
    "DOT": "polkadot",
    "AVAX": "avalanche-2",
    "MATIC": "matic-network",
    "LINK": "chainlink",
    "UNI": "uniswap",
    "LTC": "litecoin",
    "ATOM": "cosmos",
    "NEAR": "near",
    "AAVE": "aave",
    "MKR": "maker",
    "XMR": "monero",
}


def search_coins(coins: Iterable[CoinInfo], term: str, limit: int = MAX_SEARCH_RESULTS) -> list[CoinInfo]:
    """
    Match coins whose symbol or name contains term, best matches first.

    The coin a ticker usually refers to (USDT -> tether, BTC -> bitcoin)
    ranks first, then exact symbol or name matches, then prefix matches,
    then any other substring match. A blank term matches nothing.
    """
    needle = term.strip().lower()
    if not needle:
        return []

    matches = [
        coin
        for coin in coins
        if needle in coin.symbol.lower() or needle in coin.name.lower() or coin.id == needle
    ]
    matches.sort(key=lambda coin: (_rank(coin, needle), len(coin.name), coin.name.lower()))
    return matches[:limit]


def _rank(coin: CoinInfo, needle: str) -> int:
    symbol = coin.symbol.lower()
    name = coin.name.lower()
    if coin.id == needle or coin.id == PREFERRED_IDS.get(needle.upper()):
        return 0
    if symbol == needle or name == needle:
        return 1
    if symbol.startswith(needle) or name.startswith(needle):
        return 2
    return 3
