"""
Integration tests for the SQLAlchemy stores with SQLite.

Tests cover:
- Exchange and asset CRUD through SqlAlchemyRecordStore
- Exact decimal round-trips
- Cascade delete and uniqueness
- Read-only mode and error mapping
- Settings repository upsert
- Full AppContext start/close against a temporary data directory
"""

from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from cryptofolio.app_context import AppContext
from cryptofolio.config.settings import Settings
from cryptofolio.core.exceptions import (
    AuthorizationDeniedError,
    NotFoundError,
    TransientError,
    ValidationError,
)
from cryptofolio.domain.models import (
    AssetCreate,
    AssetUpdate,
    ExchangeCreate,
    ExchangeUpdate,
    LoadState,
    UserSettings,
)
from cryptofolio.repositories.sqlalchemy import (
    SqlAlchemyRecordStore,
    SqlAlchemySettingsRepository,
    create_db_engine,
    create_session_factory,
    init_db,
)


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def session_factory(tmp_path):
    """Session factory over a fresh SQLite file."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def sql_store(session_factory, clock) -> SqlAlchemyRecordStore:
    return SqlAlchemyRecordStore(session_factory, clock=clock)


# =============================================================================
# RECORD STORE TESTS
# =============================================================================


class TestExchanges:
    """Exchange persistence."""

    @pytest.mark.asyncio
    async def test_create_and_list(self, sql_store, clock):
        """
        GIVEN an empty database
        WHEN I create two exchanges
        THEN both are listed ordered by name with ids assigned
        """
        await sql_store.create_exchange(ExchangeCreate(name="Ledger"))
        await sql_store.create_exchange(ExchangeCreate(name="Binance"))

        exchanges = await sql_store.list_exchanges()

        assert [e.name for e in exchanges] == ["Binance", "Ledger"]
        assert all(e.id for e in exchanges)
        assert exchanges[0].created_at == clock.now()

    @pytest.mark.asyncio
    async def test_update_exchange(self, sql_store):
        exchange = await sql_store.create_exchange(ExchangeCreate(name="Coinbase"))

        updated = await sql_store.update_exchange(exchange.id, ExchangeUpdate(name="Coinbase Pro"))

        assert updated.id == exchange.id
        assert updated.name == "Coinbase Pro"

    @pytest.mark.asyncio
    async def test_update_missing_exchange(self, sql_store):
        with pytest.raises(NotFoundError):
            await sql_store.update_exchange("missing", ExchangeUpdate(name="X"))

    @pytest.mark.asyncio
    async def test_delete_exchange_cascades_to_assets(self, sql_store):
        exchange = await sql_store.create_exchange(ExchangeCreate(name="Kraken"))
        await sql_store.create_asset(
            AssetCreate(exchange_id=exchange.id, symbol="BTC", quantity="1", purchase_price_avg="1")
        )

        await sql_store.delete_exchange(exchange.id)

        assert await sql_store.list_exchanges() == []
        assert await sql_store.list_assets(exchange.id) == []


class TestAssets:
    """Asset persistence."""

    @pytest.mark.asyncio
    async def test_decimal_values_round_trip_exactly(self, sql_store):
        """
        GIVEN quantities with many decimal places
        WHEN the asset is stored and listed
        THEN the values come back unchanged
        """
        exchange = await sql_store.create_exchange(ExchangeCreate(name="Binance"))
        created = await sql_store.create_asset(
            AssetCreate(
                exchange_id=exchange.id,
                symbol="eth",
                quantity=Decimal("0.123456789012345678"),
                purchase_price_avg=Decimal("2345.67"),
            )
        )

        [listed] = await sql_store.list_assets(exchange.id)

        assert created.symbol == "ETH"
        assert listed.quantity == Decimal("0.123456789012345678")
        assert listed.purchase_price_avg == Decimal("2345.67")

    @pytest.mark.asyncio
    async def test_duplicate_symbol_violates_uniqueness(self, sql_store):
        exchange = await sql_store.create_exchange(ExchangeCreate(name="Binance"))
        await sql_store.create_asset(
            AssetCreate(exchange_id=exchange.id, symbol="BTC", quantity="1", purchase_price_avg="1")
        )

        with pytest.raises(ValidationError):
            await sql_store.create_asset(
                AssetCreate(exchange_id=exchange.id, symbol="btc", quantity="2", purchase_price_avg="2")
            )

    @pytest.mark.asyncio
    async def test_create_asset_on_missing_exchange(self, sql_store):
        with pytest.raises(NotFoundError):
            await sql_store.create_asset(
                AssetCreate(exchange_id="missing", symbol="BTC", quantity="1", purchase_price_avg="1")
            )

    @pytest.mark.asyncio
    async def test_partial_update_touches_only_given_fields(self, sql_store, clock):
        exchange = await sql_store.create_exchange(ExchangeCreate(name="Binance"))
        asset = await sql_store.create_asset(
            AssetCreate(exchange_id=exchange.id, symbol="SOL", quantity="10", purchase_price_avg="20")
        )
        clock.advance(60)

        updated = await sql_store.update_asset(asset.id, AssetUpdate(quantity="12.5"))

        assert updated.quantity == Decimal("12.5")
        assert updated.purchase_price_avg == Decimal("20")
        assert updated.symbol == "SOL"
        assert updated.last_updated == clock.now()

    @pytest.mark.asyncio
    async def test_delete_asset(self, sql_store):
        exchange = await sql_store.create_exchange(ExchangeCreate(name="Binance"))
        asset = await sql_store.create_asset(
            AssetCreate(exchange_id=exchange.id, symbol="SOL", quantity="1", purchase_price_avg="1")
        )

        await sql_store.delete_asset(asset.id)

        assert await sql_store.list_assets(exchange.id) == []
        with pytest.raises(NotFoundError):
            await sql_store.delete_asset(asset.id)


class TestStoreModes:
    """Credentials, read-only mode and error mapping."""

    def test_has_credentials(self, session_factory):
        assert SqlAlchemyRecordStore(session_factory).has_credentials() is True
        assert SqlAlchemyRecordStore(None).has_credentials() is False

    @pytest.mark.asyncio
    async def test_read_only_rejects_mutations(self, session_factory):
        store = SqlAlchemyRecordStore(session_factory, read_only=True)

        with pytest.raises(AuthorizationDeniedError):
            await store.create_exchange(ExchangeCreate(name="Binance"))
        assert await store.list_exchanges() == []

    @pytest.mark.asyncio
    async def test_operational_error_maps_to_transient(self, sql_store):
        with patch.object(
            SqlAlchemyRecordStore,
            "_list_exchanges",
            side_effect=OperationalError("SELECT", {}, Exception("database is locked")),
        ):
            with pytest.raises(TransientError):
                await sql_store.list_exchanges()


# =============================================================================
# SETTINGS REPOSITORY TESTS
# =============================================================================


class TestSettingsRepository:
    """Single-row settings upsert."""

    @pytest.mark.asyncio
    async def test_get_empty_returns_none(self, session_factory):
        repo = SqlAlchemySettingsRepository(session_factory)

        assert await repo.get() is None

    @pytest.mark.asyncio
    async def test_save_then_overwrite(self, session_factory):
        repo = SqlAlchemySettingsRepository(session_factory)

        await repo.save(UserSettings(initial_capital=Decimal("10000")))
        await repo.save(UserSettings(initial_capital=Decimal("15000.50")))

        stored = await repo.get()
        assert stored.initial_capital == Decimal("15000.50")
        assert stored.currency == "USD"


# =============================================================================
# APP CONTEXT
# =============================================================================


class TestAppContext:
    """End-to-end wiring over SQLite and the stub quote source."""

    @pytest.mark.asyncio
    async def test_start_add_and_reload(self, tmp_path):
        """
        GIVEN a fresh data directory
        WHEN holdings are added and a second context starts on the same directory
        THEN the second context loads and values them
        """
        settings = Settings(data_dir=tmp_path, connectivity_probe_enabled=False)
        context = AppContext(settings)
        await context.start()
        exchange = await context.portfolio.add_exchange(ExchangeCreate(name="Binance"))
        await context.portfolio.add_asset(
            AssetCreate(exchange_id=exchange.id, symbol="BTC", quantity="0.5", purchase_price_avg="40000")
        )
        await context.portfolio.update_initial_capital(Decimal("20000"))
        await context.close()

        second = AppContext(settings)
        await second.start()
        await second.portfolio.revalue()

        try:
            assert second.portfolio.state == LoadState.READY
            assert second.portfolio.initial_capital == Decimal("20000")
            assert second.portfolio.summary.total_value == Decimal("21000")
            assert second.portfolio.summary.total_profit_loss == Decimal("1000")
            assert (tmp_path / "settings.json").exists()
        finally:
            await second.close()
