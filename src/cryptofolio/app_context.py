"""Application context for in-process service management.

Builds every collaborator from Settings and owns their lifecycle. Used by the
HTTP app and usable directly from scripts.
"""

import logging
from typing import Optional

import requests

from cryptofolio.config.settings import Settings, get_settings
from cryptofolio.core.clock import Clock, SystemClock
from cryptofolio.providers import CoinGeckoQuoteSource, CoinListCache, QuoteSource, StubQuoteSource
from cryptofolio.repositories import LocalSettingsStore
from cryptofolio.repositories.sqlalchemy import (
    SqlAlchemyRecordStore,
    SqlAlchemySettingsRepository,
    create_db_engine,
    create_session_factory,
    init_db,
)
from cryptofolio.services import (
    ConnectivityMonitor,
    EventBus,
    PortfolioStore,
    PriceCache,
    RetryableLoader,
    UserSettingsService,
    ValuationEngine,
)

logger = logging.getLogger(__name__)


class AppContext:
    """
    Application context wiring the portfolio store and its collaborators.

    Nothing touches the network or the database until start() is awaited.
    """

    def __init__(self, settings: Optional[Settings] = None, clock: Optional[Clock] = None):
        """
        Initialize application context.

        Args:
            settings: Configuration to build from. Uses global settings if not provided.
            clock: Time source shared by caches and stores.
        """
        self.settings = settings or get_settings()
        self.clock = clock or SystemClock()

        self.engine = create_db_engine(self.settings.get_database_url())
        self.session_factory = create_session_factory(self.engine)
        self._http_session: Optional[requests.Session] = None

        self.record_store = SqlAlchemyRecordStore(
            self.session_factory,
            read_only=self.settings.record_store_read_only,
            clock=self.clock,
        )
        self.settings_service = UserSettingsService(
            remote=SqlAlchemySettingsRepository(self.session_factory, clock=self.clock),
            local=LocalSettingsStore(self.settings.get_local_settings_path()),
        )
        self.quote_source = self._build_quote_source()
        self.price_cache = PriceCache(
            self.quote_source,
            ttl_seconds=self.settings.price_cache_ttl_seconds,
            clock=self.clock,
        )
        self.bus = EventBus()
        self.connectivity = ConnectivityMonitor(
            probe_host=self.settings.connectivity_probe_host,
            probe_port=self.settings.connectivity_probe_port,
        )
        self.loader = RetryableLoader(
            is_offline=lambda: self.connectivity.is_offline,
            max_retries=self.settings.retry_max_retries,
            base_delay=self.settings.retry_base_delay_seconds,
        )
        self.portfolio = PortfolioStore(
            record_store=self.record_store,
            price_cache=self.price_cache,
            engine=ValuationEngine(),
            bus=self.bus,
            loader=self.loader,
            settings_service=self.settings_service,
            connectivity=self.connectivity,
            clock=self.clock,
            price_refresh_interval_seconds=self.settings.price_refresh_interval_seconds,
            refresh_throttle_seconds=self.settings.refresh_throttle_seconds,
        )

    def _build_quote_source(self) -> QuoteSource:
        if self.settings.quote_source == "coingecko":
            self._http_session = requests.Session()
            return CoinGeckoQuoteSource(
                base_url=self.settings.coingecko_base_url,
                api_key=self.settings.coingecko_api_key,
                timeout_seconds=self.settings.coingecko_timeout_seconds,
                coin_list=CoinListCache(self.settings.coin_list_ttl_seconds, clock=self.clock),
                session=self._http_session,
                clock=self.clock,
            )
        return StubQuoteSource(clock=self.clock)

    async def start(self) -> None:
        """Create tables, start background checks and run the initial load."""
        init_db(self.engine)
        if self.settings.connectivity_probe_enabled:
            await self.connectivity.check()
            self.connectivity.start_watching(self.settings.connectivity_check_interval_seconds)
        logger.info("Starting portfolio store (quote source: %s)", self.settings.quote_source)
        await self.portfolio.start()

    async def close(self) -> None:
        await self.portfolio.close()
        await self.connectivity.stop_watching()
        if self._http_session is not None:
            self._http_session.close()
        self.engine.dispose()


# Global context instance, set by the application lifespan
_context: Optional[AppContext] = None


def get_app_context() -> AppContext:
    """Return the current context, creating one from global settings if needed."""
    global _context
    if _context is None:
        _context = AppContext()
    return _context


def set_app_context(context: Optional[AppContext]) -> None:
    """Set (or clear) the global context instance."""
    global _context
    _context = context
