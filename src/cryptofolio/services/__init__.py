"""Application services."""

from cryptofolio.services.connectivity import ConnectivityMonitor
from cryptofolio.services.event_bus import EventBus
from cryptofolio.services.portfolio_store import PortfolioStore
from cryptofolio.services.price_cache import PriceCache
from cryptofolio.services.retry import RetryableLoader
from cryptofolio.services.settings_service import UserSettingsService
from cryptofolio.services.throttle import CoalescingThrottle
from cryptofolio.services.valuation_engine import ValuationEngine

__all__ = [
    "ConnectivityMonitor",
    "EventBus",
    "PortfolioStore",
    "PriceCache",
    "RetryableLoader",
    "UserSettingsService",
    "CoalescingThrottle",
    "ValuationEngine",
]
