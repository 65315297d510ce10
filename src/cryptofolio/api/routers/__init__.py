"""API routers package."""

from cryptofolio.api.routers.portfolio import router as portfolio_router
from cryptofolio.api.routers.exchanges import router as exchanges_router
from cryptofolio.api.routers.assets import router as assets_router
from cryptofolio.api.routers.settings import router as settings_router
from cryptofolio.api.routers.coins import router as coins_router

__all__ = [
    "portfolio_router",
    "exchanges_router",
    "assets_router",
    "settings_router",
    "coins_router",
]
