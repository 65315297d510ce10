"""Portfolio endpoints: current view and refresh triggers."""

from fastapi import APIRouter, Depends

from cryptofolio.api.deps import get_portfolio_store
from cryptofolio.api.schemas import (
    ErrorInfo,
    ExchangeWithAssetsResponse,
    PortfolioResponse,
    SummaryResponse,
)
from cryptofolio.services import PortfolioStore

router = APIRouter(prefix="/portfolio", tags=["portfolio"])


def build_portfolio_response(store: PortfolioStore) -> PortfolioResponse:
    error = store.error
    summary = store.summary
    return PortfolioResponse(
        state=store.state,
        is_loading=store.is_loading,
        is_pricing=store.is_pricing,
        is_offline=store.is_offline,
        retry_count=store.retry_count,
        last_updated=store.last_updated,
        error=ErrorInfo(code=error.code, message=error.message) if error else None,
        initial_capital=store.initial_capital,
        summary=SummaryResponse.model_validate(summary) if summary else None,
        exchanges=[
            ExchangeWithAssetsResponse.model_validate(e) for e in store.portfolio_with_prices
        ],
    )


@router.get("", response_model=PortfolioResponse)
async def get_portfolio(store: PortfolioStore = Depends(get_portfolio_store)) -> PortfolioResponse:
    """
    Return the current portfolio view.

    Reflects in-memory state only; it never triggers a load or a price fetch.
    """
    return build_portfolio_response(store)


@router.post("/refresh", response_model=PortfolioResponse)
async def refresh_portfolio(store: PortfolioStore = Depends(get_portfolio_store)) -> PortfolioResponse:
    """Reload holdings from the record store and revalue (throttled)."""
    await store.refresh_data()
    return build_portfolio_response(store)


@router.post("/refresh-prices", response_model=PortfolioResponse)
async def refresh_prices(store: PortfolioStore = Depends(get_portfolio_store)) -> PortfolioResponse:
    """Discard cached quotes and revalue."""
    await store.refresh_prices()
    return build_portfolio_response(store)
