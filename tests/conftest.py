"""
Pytest configuration and fixtures for cryptofolio tests.

This module provides:
- A manual clock for deterministic TTL expiry
- Counting and failing quote sources
- An in-memory record store with failure injection
- In-memory settings repository
- Service and store fixtures wired from the above
- FastAPI test client over a temporary data directory
"""

import asyncio
import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from cryptofolio.app_context import set_app_context
from cryptofolio.config.settings import Settings, reset_settings, set_settings
from cryptofolio.core.clock import UTC
from cryptofolio.core.exceptions import NotFoundError, TransientError
from cryptofolio.domain.models import (
    Asset,
    AssetCreate,
    AssetUpdate,
    Exchange,
    ExchangeCreate,
    ExchangeUpdate,
    UserSettings,
    normalize_symbol,
    to_decimal,
)
from cryptofolio.domain.views import Quote
from cryptofolio.main import app
from cryptofolio.repositories import LocalSettingsStore
from cryptofolio.services import (
    ConnectivityMonitor,
    EventBus,
    PortfolioStore,
    PriceCache,
    RetryableLoader,
    UserSettingsService,
    ValuationEngine,
)


# =============================================================================
# TIME HELPERS
# =============================================================================


def utc_datetime(year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> datetime:
    """Create a localized datetime in UTC."""
    return UTC.localize(datetime(year, month, day, hour, minute))


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None):
        self._now = start or utc_datetime(2024, 6, 15)

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now = self._now + timedelta(seconds=seconds)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture(autouse=True)
def clean_settings():
    """Every test starts from default settings."""
    reset_settings()
    yield
    reset_settings()


# =============================================================================
# QUOTE SOURCE FAKES
# =============================================================================


class CountingQuoteSource:
    """
    Deterministic quote source that records every batch call.

    Set `error` to make the next calls raise it.
    """

    DEFAULT_PRICES = {
        "BTC": Decimal("50000"),
        "ETH": Decimal("3000"),
        "SOL": Decimal("100"),
    }

    def __init__(self, prices: Optional[dict[str, Decimal]] = None, clock: Optional[ManualClock] = None):
        self.prices = dict(self.DEFAULT_PRICES if prices is None else prices)
        self.clock = clock or ManualClock()
        self.calls: list[list[str]] = []
        self.error: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def fetch_batch(self, symbols: list[str]) -> dict[str, Quote]:
        self.calls.append(list(symbols))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return {
            s: Quote(symbol=s, current_price=self.prices[s], as_of=self.clock.now())
            for s in symbols
            if s in self.prices
        }


@pytest.fixture
def quote_source(clock) -> CountingQuoteSource:
    return CountingQuoteSource(clock=clock)


@pytest.fixture
def price_cache(quote_source, clock) -> PriceCache:
    return PriceCache(quote_source, ttl_seconds=300, clock=clock)


# =============================================================================
# RECORD STORE FAKES
# =============================================================================


class FakeRecordStore:
    """
    In-memory RecordStore.

    failures maps a method name to a list of exceptions raised, one per
    call, before the real behavior resumes. gate (if set) blocks
    list_exchanges until released.
    """

    def __init__(self, credentials: bool = True):
        self.credentials = credentials
        self.exchanges: dict[str, Exchange] = {}
        self.assets: dict[str, Asset] = {}
        self.failures: dict[str, list[Exception]] = {}
        self.calls: dict[str, int] = {}
        self.gate: Optional[asyncio.Event] = None

    def fail(self, method: str, *errors: Exception) -> None:
        self.failures.setdefault(method, []).extend(errors)

    def _enter(self, method: str) -> None:
        self.calls[method] = self.calls.get(method, 0) + 1
        pending = self.failures.get(method)
        if pending:
            raise pending.pop(0)

    def has_credentials(self) -> bool:
        return self.credentials

    async def list_exchanges(self) -> list[Exchange]:
        self._enter("list_exchanges")
        if self.gate is not None:
            await self.gate.wait()
        return sorted(self.exchanges.values(), key=lambda e: e.name)

    async def list_assets(self, exchange_id: str) -> list[Asset]:
        self._enter("list_assets")
        return sorted(
            (a for a in self.assets.values() if a.exchange_id == exchange_id),
            key=lambda a: a.symbol,
        )

    async def create_exchange(self, data: ExchangeCreate) -> Exchange:
        self._enter("create_exchange")
        exchange = Exchange(id=str(uuid.uuid4()), name=data.name, created_at=utc_datetime(2024, 6, 1))
        self.exchanges[exchange.id] = exchange
        return exchange

    async def update_exchange(self, exchange_id: str, patch: ExchangeUpdate) -> Exchange:
        self._enter("update_exchange")
        if exchange_id not in self.exchanges:
            raise NotFoundError("Exchange", exchange_id)
        current = self.exchanges[exchange_id]
        updated = Exchange(id=current.id, name=patch.name or current.name, created_at=current.created_at)
        self.exchanges[exchange_id] = updated
        return updated

    async def delete_exchange(self, exchange_id: str) -> None:
        self._enter("delete_exchange")
        if self.exchanges.pop(exchange_id, None) is None:
            raise NotFoundError("Exchange", exchange_id)
        self.assets = {k: a for k, a in self.assets.items() if a.exchange_id != exchange_id}

    async def create_asset(self, data: AssetCreate) -> Asset:
        self._enter("create_asset")
        asset = Asset(
            id=str(uuid.uuid4()),
            exchange_id=data.exchange_id,
            symbol=data.symbol,
            quantity=data.quantity,
            purchase_price_avg=data.purchase_price_avg,
            logo_url=data.logo_url,
        )
        self.assets[asset.id] = asset
        return asset

    async def update_asset(self, asset_id: str, patch: AssetUpdate) -> Asset:
        self._enter("update_asset")
        if asset_id not in self.assets:
            raise NotFoundError("Asset", asset_id)
        current = self.assets[asset_id]
        updated = Asset(
            id=current.id,
            exchange_id=patch.exchange_id or current.exchange_id,
            symbol=normalize_symbol(patch.symbol) or current.symbol,
            quantity=to_decimal(patch.quantity) if patch.quantity is not None else current.quantity,
            purchase_price_avg=(
                to_decimal(patch.purchase_price_avg)
                if patch.purchase_price_avg is not None
                else current.purchase_price_avg
            ),
            logo_url=patch.logo_url or current.logo_url,
        )
        self.assets[asset_id] = updated
        return updated

    async def delete_asset(self, asset_id: str) -> None:
        self._enter("delete_asset")
        if self.assets.pop(asset_id, None) is None:
            raise NotFoundError("Asset", asset_id)

    # Seeding helpers (bypass call counting)
    def seed_exchange(self, name: str, exchange_id: Optional[str] = None) -> Exchange:
        exchange = Exchange(id=exchange_id or f"ex-{name.lower()}", name=name)
        self.exchanges[exchange.id] = exchange
        return exchange

    def seed_asset(self, exchange_id: str, symbol: str, quantity: str, price: str) -> Asset:
        asset = Asset(
            id=f"{exchange_id}-{symbol.lower()}",
            exchange_id=exchange_id,
            symbol=symbol,
            quantity=Decimal(quantity),
            purchase_price_avg=Decimal(price),
        )
        self.assets[asset.id] = asset
        return asset


@pytest.fixture
def record_store() -> FakeRecordStore:
    return FakeRecordStore()


# =============================================================================
# SETTINGS FAKES
# =============================================================================


class InMemorySettingsRepository:
    """Remote settings store that can be switched to failing."""

    def __init__(self, settings: Optional[UserSettings] = None):
        self.settings = settings
        self.error: Optional[Exception] = None
        self.saved: list[UserSettings] = []

    async def get(self) -> Optional[UserSettings]:
        if self.error is not None:
            raise self.error
        return self.settings

    async def save(self, settings: UserSettings) -> UserSettings:
        if self.error is not None:
            raise self.error
        self.settings = settings
        self.saved.append(settings)
        return settings


@pytest.fixture
def remote_settings() -> InMemorySettingsRepository:
    return InMemorySettingsRepository()


@pytest.fixture
def local_settings(tmp_path) -> LocalSettingsStore:
    return LocalSettingsStore(tmp_path / "settings.json")


@pytest.fixture
def settings_service(remote_settings, local_settings) -> UserSettingsService:
    return UserSettingsService(remote=remote_settings, local=local_settings)


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


class RecordingSleep:
    """Replacement for asyncio.sleep that records delays and returns at once."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def connectivity() -> ConnectivityMonitor:
    return ConnectivityMonitor(offline=False)


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def loader(connectivity, sleep) -> RetryableLoader:
    return RetryableLoader(is_offline=lambda: connectivity.is_offline, sleep=sleep)


@pytest.fixture
def store(
    record_store,
    price_cache,
    bus,
    loader,
    settings_service,
    connectivity,
    clock,
) -> PortfolioStore:
    """PortfolioStore over in-memory fakes; periodic refresh effectively disabled."""
    return PortfolioStore(
        record_store=record_store,
        price_cache=price_cache,
        engine=ValuationEngine(),
        bus=bus,
        loader=loader,
        settings_service=settings_service,
        connectivity=connectivity,
        clock=clock,
        price_refresh_interval_seconds=3600,
        refresh_throttle_seconds=0.2,
    )


@pytest.fixture
def seeded_store(record_store) -> FakeRecordStore:
    """Record store with two exchanges: Binance (BTC, USDT) and Ledger (ETH)."""
    binance = record_store.seed_exchange("Binance")
    ledger = record_store.seed_exchange("Ledger")
    record_store.seed_asset(binance.id, "BTC", "0.5", "40000")
    record_store.seed_asset(binance.id, "USDT", "1000", "1")
    record_store.seed_asset(ledger.id, "ETH", "2", "2500")
    return record_store


# =============================================================================
# API TEST CLIENT
# =============================================================================


@pytest.fixture
def client(tmp_path) -> TestClient:
    """Provide FastAPI test client over a temporary data directory."""
    set_settings(
        Settings(
            data_dir=tmp_path,
            connectivity_probe_enabled=False,
            refresh_throttle_seconds=0.05,
        )
    )
    set_app_context(None)
    with TestClient(app) as c:
        yield c
    set_app_context(None)
