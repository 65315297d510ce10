"""Exchange endpoints."""

from fastapi import APIRouter, Depends

from cryptofolio.api.deps import get_portfolio_store
from cryptofolio.api.schemas import ExchangeCreateRequest, ExchangeResponse, ExchangeUpdateRequest
from cryptofolio.domain.models import ExchangeCreate, ExchangeUpdate
from cryptofolio.services import PortfolioStore

router = APIRouter(prefix="/exchanges", tags=["exchanges"])


@router.get("", response_model=list[ExchangeResponse])
async def list_exchanges(store: PortfolioStore = Depends(get_portfolio_store)) -> list[ExchangeResponse]:
    return [ExchangeResponse.model_validate(e) for e in store.exchanges]


@router.post("", response_model=ExchangeResponse, status_code=201)
async def create_exchange(
    data: ExchangeCreateRequest,
    store: PortfolioStore = Depends(get_portfolio_store),
) -> ExchangeResponse:
    """Create a new exchange."""
    exchange = await store.add_exchange(ExchangeCreate(name=data.name))
    return ExchangeResponse.model_validate(exchange)


@router.put("/{exchange_id}", response_model=ExchangeResponse)
async def update_exchange(
    exchange_id: str,
    data: ExchangeUpdateRequest,
    store: PortfolioStore = Depends(get_portfolio_store),
) -> ExchangeResponse:
    """Rename an exchange."""
    exchange = await store.update_exchange(exchange_id, ExchangeUpdate(name=data.name))
    return ExchangeResponse.model_validate(exchange)


@router.delete("/{exchange_id}", status_code=204)
async def delete_exchange(
    exchange_id: str,
    store: PortfolioStore = Depends(get_portfolio_store),
) -> None:
    """Delete an exchange and all of its assets."""
    await store.delete_exchange(exchange_id)
