"""Asset endpoints."""

from fastapi import APIRouter, Depends

from cryptofolio.api.deps import get_portfolio_store
from cryptofolio.api.schemas import AssetCreateRequest, AssetResponse, AssetUpdateRequest
from cryptofolio.domain.models import AssetCreate, AssetUpdate
from cryptofolio.services import PortfolioStore

router = APIRouter(prefix="/assets", tags=["assets"])


@router.post("", response_model=AssetResponse, status_code=201)
async def create_asset(
    data: AssetCreateRequest,
    store: PortfolioStore = Depends(get_portfolio_store),
) -> AssetResponse:
    """Add an asset to an exchange. A symbol may appear once per exchange."""
    asset = await store.add_asset(
        AssetCreate(
            exchange_id=data.exchange_id,
            symbol=data.symbol,
            quantity=data.quantity,
            purchase_price_avg=data.purchase_price_avg,
            logo_url=data.logo_url,
        )
    )
    return AssetResponse.model_validate(asset)


@router.put("/{asset_id}", response_model=AssetResponse)
async def update_asset(
    asset_id: str,
    data: AssetUpdateRequest,
    store: PortfolioStore = Depends(get_portfolio_store),
) -> AssetResponse:
    """Partially update an asset."""
    asset = await store.update_asset(asset_id, AssetUpdate(**data.model_dump(exclude_unset=True)))
    return AssetResponse.model_validate(asset)


@router.delete("/{asset_id}", status_code=204)
async def delete_asset(
    asset_id: str,
    store: PortfolioStore = Depends(get_portfolio_store),
) -> None:
    await store.delete_asset(asset_id)
