"""Price cache in front of the quote source."""

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from cryptofolio.core.clock import Clock, SystemClock
from cryptofolio.domain.models import is_stablecoin
from cryptofolio.domain.views import Quote
from cryptofolio.providers.quote_source import QuoteSource

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300


@dataclass
class _CacheEntry:
    quote: Quote
    fetched_at: datetime


class PriceCache:
    """
    Quote cache with a per-entry time-to-live.

    Stablecoins always resolve to a fixed 1.0 quote and never touch the
    source or the store. Everything else is served from cache while younger
    than the TTL; the remainder is fetched in one batch call. Entries live
    for the lifetime of the object only.

    Concurrent gets share fetches: a symbol already being fetched by another
    caller is awaited rather than requested again.
    """

    def __init__(
        self,
        source: QuoteSource,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Optional[Clock] = None,
    ):
        self._source = source
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock or SystemClock()
        self._entries: dict[str, _CacheEntry] = {}
        self._inflight: dict[str, "asyncio.Task[dict[str, Optional[Quote]]]"] = {}

    async def get(self, symbols: list[str], refresh: bool = True) -> dict[str, Optional[Quote]]:
        """
        Resolve quotes for symbols.

        Returns dict mapping upper-case symbol -> Quote, or None when no
        price is available. With refresh=False the source is never called
        and expired entries are returned flagged is_stale. If the batch
        fetch fails, expired entries are served flagged is_stale as well.
        """
        if not symbols:
            return {}

        # Normalize symbols, keep first-seen order
        symbols = list(dict.fromkeys(s.strip().upper() for s in symbols))
        now = self._clock.now()

        result: dict[str, Optional[Quote]] = {}
        missing: list[str] = []
        for symbol in symbols:
            if is_stablecoin(symbol):
                result[symbol] = self._stablecoin_quote(symbol, now)
                continue
            entry = self._entries.get(symbol)
            if entry is not None and now - entry.fetched_at < self._ttl:
                result[symbol] = entry.quote
            else:
                missing.append(symbol)

        if not missing:
            return result

        if not refresh:
            for symbol in missing:
                result[symbol] = self._stale(symbol)
            return result

        joined = {s: self._inflight[s] for s in missing if s in self._inflight}
        to_fetch = [s for s in missing if s not in joined]
        tasks: dict["asyncio.Task[dict[str, Optional[Quote]]]", list[str]] = {}
        for symbol, task in joined.items():
            tasks.setdefault(task, []).append(symbol)
        if to_fetch:
            tasks[self._start_fetch(to_fetch)] = to_fetch

        for task, task_symbols in tasks.items():
            try:
                fetched = await asyncio.shield(task)
            except Exception as e:
                # Graceful degradation: serve expired entries, flagged
                logger.warning("Quote fetch failed for %d symbol(s): %s", len(task_symbols), e)
                for symbol in task_symbols:
                    result[symbol] = self._stale(symbol)
                continue
            for symbol in task_symbols:
                result[symbol] = fetched.get(symbol)

        return result

    def _start_fetch(self, symbols: list[str]) -> "asyncio.Task[dict[str, Optional[Quote]]]":
        task = asyncio.get_running_loop().create_task(self._fetch(symbols))
        for symbol in symbols:
            self._inflight[symbol] = task

        def done(finished: asyncio.Task) -> None:
            for symbol in symbols:
                if self._inflight.get(symbol) is finished:
                    del self._inflight[symbol]
            if not finished.cancelled():
                # Waiters may all have been cancelled
                finished.exception()

        task.add_done_callback(done)
        return task

    async def _fetch(self, symbols: list[str]) -> dict[str, Optional[Quote]]:
        fetched = await self._source.fetch_batch(symbols)
        fetched_at = self._clock.now()
        result: dict[str, Optional[Quote]] = {}
        for symbol in symbols:
            quote = fetched.get(symbol)
            if quote is None:
                result[symbol] = None
                continue
            quote = replace(quote, symbol=symbol, as_of=fetched_at, is_stale=False)
            self._entries[symbol] = _CacheEntry(quote=quote, fetched_at=fetched_at)
            result[symbol] = quote
        return result

    def invalidate(self) -> None:
        """Drop every cached quote; the next get refetches regardless of TTL."""
        self._entries.clear()
        self._inflight.clear()

    def _stale(self, symbol: str) -> Optional[Quote]:
        entry = self._entries.get(symbol)
        if entry is None:
            return None
        return replace(entry.quote, is_stale=True)

    @staticmethod
    def _stablecoin_quote(symbol: str, now: datetime) -> Quote:
        return Quote(
            symbol=symbol,
            current_price=Decimal("1.0"),
            as_of=now,
            price_change_percentage_24h=Decimal("0"),
            is_stablecoin=True,
        )
