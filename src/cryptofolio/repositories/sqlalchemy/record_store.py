"""SQLAlchemy implementation of RecordStore."""

import asyncio
import uuid
from typing import Callable, Optional, TypeVar

from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    OperationalError,
    TimeoutError as SqlTimeoutError,
)
from sqlalchemy.orm import Session, sessionmaker

from cryptofolio.core.clock import Clock, SystemClock, to_utc
from cryptofolio.core.exceptions import (
    AuthorizationDeniedError,
    NotFoundError,
    TransientError,
    ValidationError,
)
from cryptofolio.domain.models import (
    Asset,
    AssetCreate,
    AssetUpdate,
    Exchange,
    ExchangeCreate,
    ExchangeUpdate,
    normalize_symbol,
    to_decimal,
)
from cryptofolio.repositories.sqlalchemy.orm_models import AssetORM, ExchangeORM

T = TypeVar("T")


class SqlAlchemyRecordStore:
    """
    SQLAlchemy-backed exchange/asset store.

    Each call opens its own session and runs in a worker thread so the event
    loop is never blocked on the database.
    """

    def __init__(
        self,
        session_factory: Optional[sessionmaker],
        read_only: bool = False,
        clock: Optional[Clock] = None,
    ):
        self._session_factory = session_factory
        self._read_only = read_only
        self._clock = clock or SystemClock()

    def has_credentials(self) -> bool:
        return self._session_factory is not None

    # Exchanges
    async def list_exchanges(self) -> list[Exchange]:
        return await self._run("list exchanges", self._list_exchanges)

    async def create_exchange(self, data: ExchangeCreate) -> Exchange:
        return await self._run("create exchange", self._create_exchange, data, mutation=True)

    async def update_exchange(self, exchange_id: str, patch: ExchangeUpdate) -> Exchange:
        return await self._run(
            "update exchange", self._update_exchange, exchange_id, patch, mutation=True
        )

    async def delete_exchange(self, exchange_id: str) -> None:
        await self._run("delete exchange", self._delete_exchange, exchange_id, mutation=True)

    # Assets
    async def list_assets(self, exchange_id: str) -> list[Asset]:
        return await self._run("list assets", self._list_assets, exchange_id)

    async def create_asset(self, data: AssetCreate) -> Asset:
        return await self._run("create asset", self._create_asset, data, mutation=True)

    async def update_asset(self, asset_id: str, patch: AssetUpdate) -> Asset:
        return await self._run("update asset", self._update_asset, asset_id, patch, mutation=True)

    async def delete_asset(self, asset_id: str) -> None:
        await self._run("delete asset", self._delete_asset, asset_id, mutation=True)

    async def _run(self, operation: str, fn: Callable[..., T], *args, mutation: bool = False) -> T:
        if self._read_only and mutation:
            raise AuthorizationDeniedError(f"Not authorized to {operation}: record store is read-only")
        try:
            return await asyncio.to_thread(self._in_session, fn, *args)
        except IntegrityError as e:
            raise ValidationError(f"Cannot {operation}: conflicting record") from e
        except (OperationalError, SqlTimeoutError, DisconnectionError) as e:
            raise TransientError(f"Cannot {operation}: database unavailable") from e

    def _in_session(self, fn: Callable[..., T], *args) -> T:
        with self._session_factory() as db:
            try:
                return fn(db, *args)
            except Exception:
                db.rollback()
                raise

    def _list_exchanges(self, db: Session) -> list[Exchange]:
        rows = db.query(ExchangeORM).order_by(ExchangeORM.name).all()
        return [self._exchange_to_domain(r) for r in rows]

    def _create_exchange(self, db: Session, data: ExchangeCreate) -> Exchange:
        orm_exchange = ExchangeORM(
            id=str(uuid.uuid4()),
            name=data.name,
            created_at=self._clock.now(),
        )
        db.add(orm_exchange)
        db.commit()
        db.refresh(orm_exchange)
        return self._exchange_to_domain(orm_exchange)

    def _update_exchange(self, db: Session, exchange_id: str, patch: ExchangeUpdate) -> Exchange:
        orm_exchange = db.get(ExchangeORM, exchange_id)
        if orm_exchange is None:
            raise NotFoundError("Exchange", exchange_id)
        if patch.name is not None:
            orm_exchange.name = patch.name
        db.commit()
        db.refresh(orm_exchange)
        return self._exchange_to_domain(orm_exchange)

    def _delete_exchange(self, db: Session, exchange_id: str) -> None:
        orm_exchange = db.get(ExchangeORM, exchange_id)
        if orm_exchange is None:
            raise NotFoundError("Exchange", exchange_id)
        db.delete(orm_exchange)
        db.commit()

    def _list_assets(self, db: Session, exchange_id: str) -> list[Asset]:
        rows = (
            db.query(AssetORM)
            .filter(AssetORM.exchange_id == exchange_id)
            .order_by(AssetORM.symbol)
            .all()
        )
        return [self._asset_to_domain(r) for r in rows]

    def _create_asset(self, db: Session, data: AssetCreate) -> Asset:
        if db.get(ExchangeORM, data.exchange_id) is None:
            raise NotFoundError("Exchange", data.exchange_id)
        orm_asset = AssetORM(
            id=str(uuid.uuid4()),
            exchange_id=data.exchange_id,
            symbol=normalize_symbol(data.symbol),
            quantity=str(to_decimal(data.quantity)),
            purchase_price_avg=str(to_decimal(data.purchase_price_avg)),
            last_updated=self._clock.now(),
            logo_url=data.logo_url,
        )
        db.add(orm_asset)
        db.commit()
        db.refresh(orm_asset)
        return self._asset_to_domain(orm_asset)

    def _update_asset(self, db: Session, asset_id: str, patch: AssetUpdate) -> Asset:
        orm_asset = db.get(AssetORM, asset_id)
        if orm_asset is None:
            raise NotFoundError("Asset", asset_id)
        if patch.exchange_id is not None:
            if db.get(ExchangeORM, patch.exchange_id) is None:
                raise NotFoundError("Exchange", patch.exchange_id)
            orm_asset.exchange_id = patch.exchange_id
        if patch.symbol is not None:
            orm_asset.symbol = normalize_symbol(patch.symbol)
        if patch.quantity is not None:
            orm_asset.quantity = str(to_decimal(patch.quantity))
        if patch.purchase_price_avg is not None:
            orm_asset.purchase_price_avg = str(to_decimal(patch.purchase_price_avg))
        if patch.logo_url is not None:
            orm_asset.logo_url = patch.logo_url
        orm_asset.last_updated = self._clock.now()
        db.commit()
        db.refresh(orm_asset)
        return self._asset_to_domain(orm_asset)

    def _delete_asset(self, db: Session, asset_id: str) -> None:
        orm_asset = db.get(AssetORM, asset_id)
        if orm_asset is None:
            raise NotFoundError("Asset", asset_id)
        db.delete(orm_asset)
        db.commit()

    @staticmethod
    def _exchange_to_domain(orm: ExchangeORM) -> Exchange:
        """Convert ORM model to domain model."""
        return Exchange(
            id=orm.id,
            name=orm.name,
            created_at=to_utc(orm.created_at) if orm.created_at else None,
        )

    @staticmethod
    def _asset_to_domain(orm: AssetORM) -> Asset:
        """Convert ORM model to domain model."""
        return Asset(
            id=orm.id,
            exchange_id=orm.exchange_id,
            symbol=orm.symbol,
            quantity=orm.quantity,
            purchase_price_avg=orm.purchase_price_avg,
            last_updated=to_utc(orm.last_updated) if orm.last_updated else None,
            logo_url=orm.logo_url,
        )
