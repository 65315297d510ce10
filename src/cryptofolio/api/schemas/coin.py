"""Pydantic schemas for coin search."""

from typing import Optional

from pydantic import BaseModel


class CoinResponse(BaseModel):
    """A listed coin matching a search."""

    model_config = {"from_attributes": True}

    id: str
    symbol: str
    name: str
    image_url: Optional[str] = None
