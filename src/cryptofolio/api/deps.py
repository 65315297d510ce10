"""Dependency injection for FastAPI."""

from fastapi import Depends, Request

from cryptofolio.app_context import AppContext
from cryptofolio.providers import CoinDirectory
from cryptofolio.services import PortfolioStore


def get_context(request: Request) -> AppContext:
    """Provide the AppContext started by the application lifespan."""
    return request.app.state.context


def get_portfolio_store(context: AppContext = Depends(get_context)) -> PortfolioStore:
    """Provide the PortfolioStore instance."""
    return context.portfolio


def get_coin_directory(context: AppContext = Depends(get_context)) -> CoinDirectory:
    """Provide the coin directory of the configured quote source."""
    return context.quote_source
