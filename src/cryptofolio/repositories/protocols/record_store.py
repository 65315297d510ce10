"""Record store protocol."""

from typing import Protocol

from cryptofolio.domain.models import (
    Asset,
    AssetCreate,
    AssetUpdate,
    Exchange,
    ExchangeCreate,
    ExchangeUpdate,
)


class RecordStore(Protocol):
    """
    Interface for exchange and asset persistence.

    Every mutation returns the authoritative persisted record. Failures are
    raised as AuthorizationDeniedError, NotFoundError or TransientError.
    """

    def has_credentials(self) -> bool:
        """Return True if the store is configured well enough to be called."""
        ...

    async def list_exchanges(self) -> list[Exchange]:
        """List all exchanges ordered by name."""
        ...

    async def list_assets(self, exchange_id: str) -> list[Asset]:
        """List the assets of one exchange ordered by symbol."""
        ...

    async def create_exchange(self, data: ExchangeCreate) -> Exchange:
        ...

    async def update_exchange(self, exchange_id: str, patch: ExchangeUpdate) -> Exchange:
        ...

    async def delete_exchange(self, exchange_id: str) -> None:
        """Delete an exchange together with its assets."""
        ...

    async def create_asset(self, data: AssetCreate) -> Asset:
        ...

    async def update_asset(self, asset_id: str, patch: AssetUpdate) -> Asset:
        ...

    async def delete_asset(self, asset_id: str) -> None:
        ...
