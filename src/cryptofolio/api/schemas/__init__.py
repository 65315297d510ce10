"""Pydantic schemas for API request/response."""

from cryptofolio.api.schemas.exchange import (
    ExchangeCreateRequest,
    ExchangeUpdateRequest,
    ExchangeResponse,
)
from cryptofolio.api.schemas.asset import (
    AssetCreateRequest,
    AssetUpdateRequest,
    AssetResponse,
)
from cryptofolio.api.schemas.portfolio import (
    ValuedAssetResponse,
    ExchangeWithAssetsResponse,
    SummaryResponse,
    ErrorInfo,
    PortfolioResponse,
)
from cryptofolio.api.schemas.coin import CoinResponse
from cryptofolio.api.schemas.settings import (
    InitialCapitalRequest,
    InitialCapitalResponse,
)

__all__ = [
    "ExchangeCreateRequest",
    "ExchangeUpdateRequest",
    "ExchangeResponse",
    "AssetCreateRequest",
    "AssetUpdateRequest",
    "AssetResponse",
    "ValuedAssetResponse",
    "ExchangeWithAssetsResponse",
    "SummaryResponse",
    "ErrorInfo",
    "PortfolioResponse",
    "InitialCapitalRequest",
    "InitialCapitalResponse",
    "CoinResponse",
]
