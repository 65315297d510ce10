"""
Portfolio store: holdings, valuation state and mutation operations.

Owns the in-memory view of the user's exchanges and assets, keeps it in sync
with the record store, and drives valuation passes through the price cache.
"""

import asyncio
import logging
from dataclasses import replace
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

from cryptofolio.core.clock import Clock, SystemClock
from cryptofolio.core.exceptions import (
    AppError,
    MissingCredentialsError,
    NotFoundError,
    OfflineError,
    ValidationError,
)
from cryptofolio.domain.models import (
    Asset,
    AssetCreate,
    AssetUpdate,
    Exchange,
    ExchangeCreate,
    ExchangeUpdate,
    LoadState,
    Topic,
    normalize_symbol,
    to_decimal,
)
from cryptofolio.domain.views import (
    AssetAdded,
    AssetDeleted,
    AssetUpdated,
    ExchangeWithAssets,
    PortfolioRefreshed,
    PortfolioSummary,
    Quote,
    SettingsUpdated,
)
from cryptofolio.repositories.protocols import RecordStore
from cryptofolio.services.connectivity import ConnectivityMonitor
from cryptofolio.services.event_bus import EventBus
from cryptofolio.services.price_cache import PriceCache
from cryptofolio.services.retry import RetryableLoader
from cryptofolio.services.settings_service import UserSettingsService
from cryptofolio.services.throttle import CoalescingThrottle
from cryptofolio.services.valuation_engine import ValuationEngine, group_by_exchange

logger = logging.getLogger(__name__)

PRICE_REFRESH_INTERVAL_SECONDS = 120.0
REFRESH_THROTTLE_SECONDS = 1.0


def parse_amount(value: Any, field_name: str) -> Decimal:
    """Parse a non-negative decimal amount or raise ValidationError."""
    try:
        amount = to_decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"{field_name} must be a number")
    if amount is None:
        raise ValidationError(f"{field_name} is required")
    if amount < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return amount


class PortfolioStore:
    """
    Stateful facade over the portfolio.

    Full loads go record store -> baseline valuation at purchase prices ->
    background valuation pass. Valuation passes are coalesced: a request
    while a pass runs causes exactly one more pass, which values the
    snapshot as it is after its quote fetch returns.

    Mutations persist first, apply the record the store returned, publish
    the matching event, then revalue. A failed mutation leaves state as it
    was.
    """

    def __init__(
        self,
        record_store: RecordStore,
        price_cache: PriceCache,
        engine: ValuationEngine,
        bus: EventBus,
        loader: RetryableLoader,
        settings_service: UserSettingsService,
        connectivity: ConnectivityMonitor,
        clock: Optional[Clock] = None,
        price_refresh_interval_seconds: float = PRICE_REFRESH_INTERVAL_SECONDS,
        refresh_throttle_seconds: float = REFRESH_THROTTLE_SECONDS,
    ):
        self._record_store = record_store
        self._price_cache = price_cache
        self._engine = engine
        self._bus = bus
        self._loader = loader
        self._settings = settings_service
        self._connectivity = connectivity
        self._clock = clock or SystemClock()
        self._price_refresh_interval = price_refresh_interval_seconds

        self._exchanges: list[Exchange] = []
        self._assets: list[Asset] = []
        self._portfolio: list[ExchangeWithAssets] = []
        self._summary: Optional[PortfolioSummary] = None
        self._last_quotes: dict[str, Optional[Quote]] = {}
        self._initial_capital = Decimal("0")
        self._state = LoadState.IDLE
        self._error: Optional[AppError] = None
        self._is_loading = False
        self._is_pricing = False
        self._last_updated: Optional[datetime] = None
        self._retry_count = 0

        self._revalue_task: Optional[asyncio.Task] = None
        self._revalue_requested = False
        self._refresh_throttle = CoalescingThrottle(self._refresh, refresh_throttle_seconds)
        self._periodic_task: Optional[asyncio.Task] = None
        self._background: set[asyncio.Task] = set()
        self._subscriptions: list[Callable[[], None]] = []
        self._remove_listener: Optional[Callable[[], None]] = None
        self._closed = False

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def exchanges(self) -> list[Exchange]:
        return list(self._exchanges)

    @property
    def assets(self) -> list[Asset]:
        return list(self._assets)

    @property
    def portfolio_with_prices(self) -> list[ExchangeWithAssets]:
        return list(self._portfolio)

    @property
    def summary(self) -> Optional[PortfolioSummary]:
        return self._summary

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def is_pricing(self) -> bool:
        return self._is_pricing

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def error(self) -> Optional[AppError]:
        return self._error

    @property
    def is_offline(self) -> bool:
        return self._connectivity.is_offline

    @property
    def last_updated(self) -> Optional[datetime]:
        return self._last_updated

    @property
    def initial_capital(self) -> Decimal:
        return self._initial_capital

    @property
    def retry_count(self) -> int:
        return self._retry_count

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Wire subscriptions and timers, then run the initial load."""
        self._subscriptions.append(
            self._bus.subscribe(Topic.SETTINGS_UPDATED, self._on_settings_updated)
        )
        self._remove_listener = self._connectivity.add_listener(self._on_connectivity_change)
        self._periodic_task = asyncio.get_running_loop().create_task(self._periodic_refresh())
        await self.load_portfolio_data()

    async def close(self) -> None:
        """
        Release subscriptions and cancel timers.

        Operations already in flight run to completion but their results
        are not applied.
        """
        if self._closed:
            return
        self._closed = True

        for unsubscribe in self._subscriptions:
            unsubscribe()
        self._subscriptions.clear()
        if self._remove_listener is not None:
            self._remove_listener()
            self._remove_listener = None

        self._refresh_throttle.cancel_pending()
        if self._periodic_task is not None:
            self._periodic_task.cancel()
            try:
                await self._periodic_task
            except asyncio.CancelledError:
                pass
            self._periodic_task = None
        logger.info("Portfolio store closed")

    # ------------------------------------------------------------------
    # Loading and refreshing
    # ------------------------------------------------------------------

    async def load_portfolio_data(self) -> None:
        """
        Load exchanges, assets and initial capital.

        A call while a load is already running returns immediately. Errors
        are recorded in `error`; the previous holdings stay in place.
        """
        if await self._load():
            self._request_revalue()

    async def refresh_data(self) -> None:
        """Throttled full reload followed by a valuation pass."""
        await asyncio.shield(self._refresh_throttle.trigger())

    async def refresh_prices(self) -> None:
        """Drop cached quotes and revalue. No-op while loading or offline."""
        if self._is_loading or self._connectivity.is_offline:
            logger.debug("Skipping price refresh (loading=%s)", self._is_loading)
            return
        self._price_cache.invalidate()
        await self.revalue()

    async def _refresh(self) -> None:
        if not await self._load() or self._closed:
            return
        await self.revalue()
        if self._closed:
            return
        self._bus.publish(Topic.PORTFOLIO_REFRESHED, PortfolioRefreshed(self.portfolio_with_prices))

    async def _load(self) -> bool:
        if self._is_loading:
            logger.debug("Portfolio load already in progress")
            return False
        if self._closed:
            return False

        if not self._record_store.has_credentials():
            self._fail(MissingCredentialsError())
            return False
        if self._connectivity.is_offline:
            self._fail(OfflineError())
            return False

        self._is_loading = True
        self._retry_count = 0
        self._set_state(LoadState.LOADING)
        try:
            exchanges = await self._loader.run(
                "load exchanges", self._record_store.list_exchanges, on_retry=self._on_retry
            )
            assets: list[Asset] = []
            for exchange in exchanges:
                assets.extend(
                    await self._loader.run(
                        f"load assets for {exchange.name}",
                        lambda exchange_id=exchange.id: self._record_store.list_assets(exchange_id),
                        on_retry=self._on_retry,
                    )
                )
            initial_capital = await self._settings.get_initial_capital()
        except AppError as e:
            if not self._closed:
                self._fail(e)
            return False
        finally:
            if not self._closed:
                self._is_loading = False

        if self._closed:
            return False

        self._exchanges = list(exchanges)
        self._assets = assets
        self._initial_capital = initial_capital
        # Baseline at purchase prices, no network call
        self._recompute({})
        self._error = None
        self._last_updated = self._clock.now()
        self._set_state(LoadState.READY)
        logger.info("Loaded %d exchange(s) with %d asset(s)", len(exchanges), len(assets))
        return True

    def _fail(self, error: AppError) -> None:
        logger.warning("Portfolio load failed: %s", error)
        self._error = error
        self._set_state(LoadState.ERROR)

    def _set_state(self, state: LoadState) -> None:
        if state is not self._state:
            logger.debug("Portfolio state %s -> %s", self._state.value, state.value)
            self._state = state

    def _on_retry(self, attempt: int) -> None:
        if not self._closed:
            self._retry_count = attempt

    # ------------------------------------------------------------------
    # Valuation
    # ------------------------------------------------------------------

    def _recompute(self, quotes: dict[str, Optional[Quote]]) -> None:
        result = self._engine.recompute(
            group_by_exchange(self._exchanges, self._assets), quotes, self._initial_capital
        )
        self._portfolio = result.updated_portfolio
        self._summary = result.summary

    def _request_revalue(self) -> "asyncio.Task[None]":
        if self._revalue_task is not None and not self._revalue_task.done():
            self._revalue_requested = True
            return self._revalue_task
        self._revalue_requested = False
        self._revalue_task = asyncio.get_running_loop().create_task(self._run_valuation())
        return self._revalue_task

    async def revalue(self) -> None:
        """Request a valuation pass and wait until the coalesced pass finishes."""
        if self._closed:
            return
        await asyncio.shield(self._request_revalue())

    async def _run_valuation(self) -> None:
        self._is_pricing = True
        try:
            while not self._closed:
                self._revalue_requested = False
                await self._valuation_pass()
                if not self._revalue_requested:
                    break
        finally:
            if not self._closed:
                self._is_pricing = False

    async def _valuation_pass(self) -> None:
        symbols = sorted({asset.symbol for asset in self._assets})
        quotes: dict[str, Optional[Quote]] = {}
        if symbols:
            # Offline: serve cached quotes only, never hit the source
            quotes = await self._price_cache.get(symbols, refresh=not self._connectivity.is_offline)
        if self._closed:
            return

        self._last_quotes = quotes
        self._recompute(quotes)
        self._last_updated = self._clock.now()
        logger.debug("Valuation pass complete for %d symbol(s)", len(symbols))

    async def _periodic_refresh(self) -> None:
        while True:
            await asyncio.sleep(self._price_refresh_interval)
            if not self._assets or self._connectivity.is_offline or self._is_loading:
                continue
            try:
                await self.revalue()
            except Exception:
                logger.exception("Periodic price refresh failed")

    # ------------------------------------------------------------------
    # Collaborator callbacks
    # ------------------------------------------------------------------

    def _on_settings_updated(self, payload: SettingsUpdated) -> None:
        if self._closed or payload.initial_capital == self._initial_capital:
            return
        self._initial_capital = payload.initial_capital
        self._recompute(self._last_quotes)
        self._request_revalue()

    def _on_connectivity_change(self, offline: bool) -> None:
        if offline or self._closed:
            return
        if isinstance(self._error, OfflineError):
            self._error = None
        logger.info("Back online; reloading portfolio")
        self._spawn(self.load_portfolio_data())

    def _spawn(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    # ------------------------------------------------------------------
    # Exchange mutations
    # ------------------------------------------------------------------

    async def add_exchange(self, data: ExchangeCreate) -> Exchange:
        self._ensure_online("add exchange")
        name = (data.name or "").strip()
        if not name:
            raise ValidationError("Exchange name is required")

        exchange = await self._record_store.create_exchange(ExchangeCreate(name=name))
        if self._closed:
            return exchange

        self._exchanges = self._exchanges + [exchange]
        self._after_mutation(Topic.PORTFOLIO_REFRESHED, None)
        await self.revalue()
        return exchange

    async def update_exchange(self, exchange_id: str, patch: ExchangeUpdate) -> Exchange:
        self._ensure_online("update exchange")
        self._require_exchange(exchange_id)
        if patch.name is not None:
            name = patch.name.strip()
            if not name:
                raise ValidationError("Exchange name is required")
            patch = ExchangeUpdate(name=name)

        exchange = await self._loader.run(
            "update exchange",
            lambda: self._record_store.update_exchange(exchange_id, patch),
            on_retry=self._on_retry,
        )
        if self._closed:
            return exchange

        self._exchanges = [exchange if e.id == exchange_id else e for e in self._exchanges]
        self._after_mutation(Topic.PORTFOLIO_REFRESHED, None)
        await self.revalue()
        return exchange

    async def delete_exchange(self, exchange_id: str) -> None:
        self._ensure_online("delete exchange")
        self._require_exchange(exchange_id)

        await self._loader.run(
            "delete exchange",
            lambda: self._record_store.delete_exchange(exchange_id),
            on_retry=self._on_retry,
        )
        if self._closed:
            return

        self._exchanges = [e for e in self._exchanges if e.id != exchange_id]
        self._assets = [a for a in self._assets if a.exchange_id != exchange_id]
        self._after_mutation(Topic.PORTFOLIO_REFRESHED, None)
        await self.revalue()

    # ------------------------------------------------------------------
    # Asset mutations
    # ------------------------------------------------------------------

    async def add_asset(self, data: AssetCreate) -> Asset:
        self._ensure_online("add asset")
        self._require_exchange(data.exchange_id)
        symbol = normalize_symbol(data.symbol)
        if symbol is None:
            raise ValidationError("Symbol is required")
        self._check_duplicate(data.exchange_id, symbol)
        cleaned = AssetCreate(
            exchange_id=data.exchange_id,
            symbol=symbol,
            quantity=parse_amount(data.quantity, "Quantity"),
            purchase_price_avg=parse_amount(data.purchase_price_avg, "Purchase price"),
            logo_url=data.logo_url,
        )

        asset = await self._record_store.create_asset(cleaned)
        if self._closed:
            return asset

        self._assets = self._assets + [asset]
        self._after_mutation(Topic.ASSET_ADDED, AssetAdded(asset=asset))
        await self.revalue()
        return asset

    async def update_asset(self, asset_id: str, patch: AssetUpdate) -> Asset:
        self._ensure_online("update asset")
        current = self._require_asset(asset_id)

        exchange_id = patch.exchange_id or current.exchange_id
        if patch.exchange_id is not None:
            self._require_exchange(patch.exchange_id)
        symbol = current.symbol
        if patch.symbol is not None:
            symbol = normalize_symbol(patch.symbol)
            if symbol is None:
                raise ValidationError("Symbol is required")
        if exchange_id != current.exchange_id or symbol != current.symbol:
            self._check_duplicate(exchange_id, symbol, exclude_id=asset_id)

        cleaned = replace(
            patch,
            symbol=symbol if patch.symbol is not None else None,
            quantity=(
                parse_amount(patch.quantity, "Quantity") if patch.quantity is not None else None
            ),
            purchase_price_avg=(
                parse_amount(patch.purchase_price_avg, "Purchase price")
                if patch.purchase_price_avg is not None
                else None
            ),
        )

        asset = await self._loader.run(
            "update asset",
            lambda: self._record_store.update_asset(asset_id, cleaned),
            on_retry=self._on_retry,
        )
        if self._closed:
            return asset

        self._assets = [asset if a.id == asset_id else a for a in self._assets]
        self._recompute(self._last_quotes)
        self._bus.publish(
            Topic.ASSET_UPDATED,
            AssetUpdated(
                asset=asset,
                exchange_id=asset.exchange_id,
                portfolio_snapshot=self.portfolio_with_prices,
            ),
        )
        await self.revalue()
        return asset

    async def delete_asset(self, asset_id: str) -> None:
        self._ensure_online("delete asset")
        self._require_asset(asset_id)

        await self._loader.run(
            "delete asset",
            lambda: self._record_store.delete_asset(asset_id),
            on_retry=self._on_retry,
        )
        if self._closed:
            return

        self._assets = [a for a in self._assets if a.id != asset_id]
        self._after_mutation(Topic.ASSET_DELETED, AssetDeleted(asset_id=asset_id))
        await self.revalue()

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    async def update_initial_capital(self, amount: Any) -> bool:
        """
        Set the initial capital baseline.

        Works offline; the settings service keeps a local copy. Returns
        False if the value could not be stored anywhere.
        """
        capital = parse_amount(amount, "Initial capital")
        saved = await self._settings.update_initial_capital(capital)
        if not saved or self._closed:
            return saved

        self._initial_capital = capital
        self._recompute(self._last_quotes)
        self._bus.publish(Topic.SETTINGS_UPDATED, SettingsUpdated(initial_capital=capital))
        await self.revalue()
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _after_mutation(self, topic: Topic, payload: Any) -> None:
        self._recompute(self._last_quotes)
        if topic is Topic.PORTFOLIO_REFRESHED:
            payload = PortfolioRefreshed(self.portfolio_with_prices)
        self._bus.publish(topic, payload)

    def _ensure_online(self, operation: str) -> None:
        if self._connectivity.is_offline:
            raise OfflineError(f"Cannot {operation} while offline")

    def _require_exchange(self, exchange_id: str) -> Exchange:
        for exchange in self._exchanges:
            if exchange.id == exchange_id:
                return exchange
        raise NotFoundError("Exchange", exchange_id)

    def _require_asset(self, asset_id: str) -> Asset:
        for asset in self._assets:
            if asset.id == asset_id:
                return asset
        raise NotFoundError("Asset", asset_id)

    def _check_duplicate(self, exchange_id: str, symbol: str, exclude_id: Optional[str] = None) -> None:
        for asset in self._assets:
            if asset.exchange_id == exchange_id and asset.symbol == symbol and asset.id != exclude_id:
                raise ValidationError(f"{symbol} already exists on this exchange")
