"""Pydantic schemas for asset endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class AssetCreateRequest(BaseModel):
    """Request schema for adding an asset to an exchange."""

    exchange_id: str = Field(..., description="Exchange ID")
    symbol: str = Field(..., min_length=1, max_length=20, description="Ticker symbol (e.g. BTC)")
    quantity: Decimal = Field(..., ge=0, description="Units held")
    purchase_price_avg: Decimal = Field(..., ge=0, description="Average purchase price in USD")
    logo_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("symbol")
    @classmethod
    def uppercase_symbol(cls, v: str) -> str:
        return v.strip().upper()


class AssetUpdateRequest(BaseModel):
    """Request schema for updating an asset (partial update)."""

    exchange_id: Optional[str] = None
    symbol: Optional[str] = Field(default=None, min_length=1, max_length=20)
    quantity: Optional[Decimal] = Field(default=None, ge=0)
    purchase_price_avg: Optional[Decimal] = Field(default=None, ge=0)
    logo_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("symbol")
    @classmethod
    def uppercase_symbol(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else None


class AssetResponse(BaseModel):
    """Response schema for a stored asset."""

    model_config = {"from_attributes": True}

    id: str
    exchange_id: str
    symbol: str
    quantity: Decimal
    purchase_price_avg: Decimal
    last_updated: Optional[datetime] = None
    logo_url: Optional[str] = None
