"""Pydantic schemas for the portfolio view."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from cryptofolio.api.schemas.asset import AssetResponse
from cryptofolio.domain.models import LoadState


class ValuedAssetResponse(AssetResponse):
    """An asset with its current valuation."""

    current_price: Decimal
    current_value: Decimal
    profit_loss: Decimal
    profit_loss_percentage: Decimal
    last_priced_at: Optional[datetime] = None
    is_price_stale: bool = False


class ExchangeWithAssetsResponse(BaseModel):
    """An exchange with its valued assets."""

    model_config = {"from_attributes": True}

    id: str
    name: str
    created_at: Optional[datetime] = None
    assets: list[ValuedAssetResponse]
    total_value: Decimal


class ExchangeAllocationResponse(BaseModel):
    model_config = {"from_attributes": True}

    exchange_id: str
    exchange_name: str
    value: Decimal
    percentage: Decimal


class AssetAllocationResponse(BaseModel):
    model_config = {"from_attributes": True}

    symbol: str
    value: Decimal
    percentage: Decimal


class SummaryResponse(BaseModel):
    """Portfolio totals and distributions."""

    model_config = {"from_attributes": True}

    total_value: Decimal
    total_investment: Decimal
    total_profit_loss: Decimal
    profit_loss_percentage: Decimal
    distribution_by_exchange: list[ExchangeAllocationResponse]
    distribution_by_asset: list[AssetAllocationResponse]
    as_of: Optional[datetime] = None


class ErrorInfo(BaseModel):
    code: str
    message: str


class PortfolioResponse(BaseModel):
    """Response for GET /portfolio: load state, summary and holdings."""

    state: LoadState
    is_loading: bool
    is_pricing: bool
    is_offline: bool
    retry_count: int
    last_updated: Optional[datetime] = None
    error: Optional[ErrorInfo] = None
    initial_capital: Decimal
    summary: Optional[SummaryResponse] = None
    exchanges: list[ExchangeWithAssetsResponse]
