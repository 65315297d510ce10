"""Pydantic schemas for exchange endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ExchangeCreateRequest(BaseModel):
    """Request schema for creating an exchange."""

    name: str = Field(..., min_length=1, max_length=255, description="Exchange or wallet name")


class ExchangeUpdateRequest(BaseModel):
    """Request schema for renaming an exchange."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)


class ExchangeResponse(BaseModel):
    """Response schema for a single exchange."""

    model_config = {"from_attributes": True}

    id: str
    name: str
    created_at: Optional[datetime] = None
