"""CoinGecko quote source."""

import asyncio
import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Optional

import requests

from cryptofolio.core.clock import Clock, SystemClock, parse_datetime_utc
from cryptofolio.core.exceptions import AuthorizationDeniedError, TransientError
from cryptofolio.domain.views import CoinInfo, Quote
from cryptofolio.providers.coin_search import PREFERRED_IDS, search_coins

logger = logging.getLogger(__name__)

# CoinGecko caps the ids parameter of /coins/markets per request
_MAX_IDS_PER_REQUEST = 250


class CoinListCache:
    """
    Coin directory built from /coins/list, with a symbol -> coin id index.

    Refreshed at most once per TTL. If a refresh fails and an older list
    exists, the older list is kept. /coins/list carries no logos, so image
    URLs are remembered from market rows as they are fetched.
    """

    def __init__(self, ttl_seconds: int = 3600, clock: Optional[Clock] = None):
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock or SystemClock()
        self._coins: Optional[list[CoinInfo]] = None
        self._ids_by_symbol: Optional[dict[str, str]] = None
        self._images: dict[str, str] = {}
        self._fetched_at: Optional[datetime] = None

    def is_fresh(self) -> bool:
        if self._ids_by_symbol is None or self._fetched_at is None:
            return False
        return self._clock.now() - self._fetched_at < self._ttl

    def get(self) -> Optional[dict[str, str]]:
        return self._ids_by_symbol

    def coins(self) -> Optional[list[CoinInfo]]:
        """Listed coins, with logos where one has been seen."""
        if self._coins is None:
            return None
        return [
            CoinInfo(id=c.id, symbol=c.symbol, name=c.name, image_url=self._images.get(c.id))
            for c in self._coins
        ]

    def remember_image(self, coin_id: str, image_url: Optional[str]) -> None:
        if coin_id and image_url:
            self._images[coin_id] = image_url

    def store(self, rows: list[dict[str, Any]]) -> dict[str, str]:
        """Keep a /coins/list payload and index it, honoring preferred ids for ambiguous tickers."""
        coins: list[CoinInfo] = []
        index: dict[str, str] = {}
        for row in rows:
            symbol = str(row.get("symbol") or "").upper()
            coin_id = row.get("id")
            if not symbol or not coin_id:
                continue
            coins.append(CoinInfo(id=coin_id, symbol=symbol, name=str(row.get("name") or symbol)))
            index.setdefault(symbol, coin_id)
        index.update(PREFERRED_IDS)
        self._coins = coins
        self._ids_by_symbol = index
        self._fetched_at = self._clock.now()
        return index


class CoinGeckoQuoteSource:
    """
    Quote source backed by the CoinGecko public API.

    One /coins/markets request per batch (chunked only past the API's id
    limit). Symbols with no known coin id are omitted from the result.
    """

    def __init__(
        self,
        base_url: str = "https://api.coingecko.com/api/v3",
        api_key: Optional[str] = None,
        timeout_seconds: float = 10.0,
        coin_list: Optional[CoinListCache] = None,
        session: Optional[requests.Session] = None,
        vs_currency: str = "usd",
        clock: Optional[Clock] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._coin_list = coin_list or CoinListCache()
        self._session = session or requests.Session()
        self._vs_currency = vs_currency
        self._clock = clock or SystemClock()
        if api_key:
            self._session.headers["x-cg-demo-api-key"] = api_key

    async def fetch_batch(self, symbols: list[str]) -> dict[str, Quote]:
        """Fetch current prices for symbols; unknown symbols are omitted."""
        if not symbols:
            return {}
        return await asyncio.to_thread(self._fetch_batch_sync, [s.upper() for s in symbols])

    async def search_coins(self, term: str) -> list[CoinInfo]:
        """Find listed coins by ticker or name, best match first."""
        if not term.strip():
            return []
        coins = await asyncio.to_thread(self._load_coins)
        return search_coins(coins, term)

    def _fetch_batch_sync(self, symbols: list[str]) -> dict[str, Quote]:
        ids_by_symbol = self._resolve_ids()

        symbols_by_id: dict[str, str] = {}
        for symbol in symbols:
            coin_id = ids_by_symbol.get(symbol)
            if coin_id is None:
                logger.debug("No CoinGecko id for symbol %s", symbol)
                continue
            symbols_by_id[coin_id] = symbol

        if not symbols_by_id:
            return {}

        result: dict[str, Quote] = {}
        coin_ids = list(symbols_by_id)
        for start in range(0, len(coin_ids), _MAX_IDS_PER_REQUEST):
            chunk = coin_ids[start:start + _MAX_IDS_PER_REQUEST]
            rows = self._get(
                "/coins/markets",
                params={"vs_currency": self._vs_currency, "ids": ",".join(chunk)},
            )
            for row in rows:
                self._coin_list.remember_image(row.get("id"), row.get("image"))
                symbol = symbols_by_id.get(row.get("id"))
                quote = self._to_quote(symbol, row) if symbol else None
                if quote is not None:
                    result[symbol] = quote
        return result

    def _resolve_ids(self) -> dict[str, str]:
        self._refresh_coin_list()
        return self._coin_list.get()

    def _load_coins(self) -> list[CoinInfo]:
        self._refresh_coin_list()
        return self._coin_list.coins()

    def _refresh_coin_list(self) -> None:
        if self._coin_list.is_fresh():
            return
        try:
            self._coin_list.store(self._get("/coins/list"))
        except TransientError:
            if self._coin_list.get() is None:
                raise
            logger.warning("Coin list refresh failed; using previous list")

    def _get(self, path: str, params: Optional[dict[str, str]] = None) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = self._session.get(url, params=params, timeout=self._timeout)
        except (requests.Timeout, requests.ConnectionError) as e:
            raise TransientError(f"CoinGecko request failed: {e}") from e

        if response.status_code in (401, 403):
            raise AuthorizationDeniedError(
                f"CoinGecko rejected the request (HTTP {response.status_code})"
            )
        if response.status_code == 429 or response.status_code >= 500:
            raise TransientError(f"CoinGecko unavailable (HTTP {response.status_code})")
        response.raise_for_status()
        return response.json()

    def _to_quote(self, symbol: str, row: dict[str, Any]) -> Optional[Quote]:
        price = row.get("current_price")
        if price is None:
            return None

        last_updated = row.get("last_updated")
        change = row.get("price_change_percentage_24h")
        return Quote(
            symbol=symbol,
            current_price=Decimal(str(price)),
            as_of=parse_datetime_utc(last_updated) if last_updated else self._clock.now(),
            price_change_percentage_24h=Decimal(str(change)) if change is not None else None,
            image_url=row.get("image"),
        )
