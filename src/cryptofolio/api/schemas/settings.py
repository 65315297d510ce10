"""Pydantic schemas for user settings endpoints."""

from decimal import Decimal

from pydantic import BaseModel, Field


class InitialCapitalRequest(BaseModel):
    """Request schema for setting the initial capital."""

    amount: Decimal = Field(..., description="Capital invested, in USD")


class InitialCapitalResponse(BaseModel):
    initial_capital: Decimal
