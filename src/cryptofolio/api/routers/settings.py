"""User settings endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from cryptofolio.api.deps import get_portfolio_store
from cryptofolio.api.schemas import InitialCapitalRequest, InitialCapitalResponse
from cryptofolio.services import PortfolioStore

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/initial-capital", response_model=InitialCapitalResponse)
async def get_initial_capital(
    store: PortfolioStore = Depends(get_portfolio_store),
) -> InitialCapitalResponse:
    return InitialCapitalResponse(initial_capital=store.initial_capital)


@router.put("/initial-capital", response_model=InitialCapitalResponse)
async def update_initial_capital(
    data: InitialCapitalRequest,
    store: PortfolioStore = Depends(get_portfolio_store),
) -> InitialCapitalResponse:
    """Set the initial capital. Stored locally when the remote store is unavailable."""
    if not await store.update_initial_capital(data.amount):
        raise HTTPException(status_code=500, detail="Initial capital could not be saved")
    return InitialCapitalResponse(initial_capital=store.initial_capital)
