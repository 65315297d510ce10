"""Coin search endpoint."""

from fastapi import APIRouter, Depends, Query

from cryptofolio.api.deps import get_coin_directory
from cryptofolio.api.schemas import CoinResponse
from cryptofolio.providers import CoinDirectory

router = APIRouter(prefix="/coins", tags=["coins"])


@router.get("/search", response_model=list[CoinResponse])
async def search_coins(
    q: str = Query(default="", max_length=50, description="Ticker or name fragment"),
    directory: CoinDirectory = Depends(get_coin_directory),
) -> list[CoinResponse]:
    """Resolve a ticker or name to listed coins, best match first."""
    coins = await directory.search_coins(q)
    return [CoinResponse.model_validate(c) for c in coins]
