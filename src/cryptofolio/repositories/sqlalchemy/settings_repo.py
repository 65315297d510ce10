"""SQLAlchemy implementation of SettingsRepository."""

import asyncio
import uuid
from typing import Optional

from sqlalchemy.exc import DisconnectionError, OperationalError, TimeoutError as SqlTimeoutError
from sqlalchemy.orm import sessionmaker

from cryptofolio.core.clock import Clock, SystemClock
from cryptofolio.core.exceptions import TransientError
from cryptofolio.domain.models import UserSettings
from cryptofolio.repositories.sqlalchemy.orm_models import UserSettingsORM


class SqlAlchemySettingsRepository:
    """SQLAlchemy-backed user settings (single row)."""

    def __init__(self, session_factory: sessionmaker, clock: Optional[Clock] = None):
        self._session_factory = session_factory
        self._clock = clock or SystemClock()

    async def get(self) -> Optional[UserSettings]:
        return await self._run(self._get)

    async def save(self, settings: UserSettings) -> UserSettings:
        return await self._run(self._save, settings)

    async def _run(self, fn, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except (OperationalError, SqlTimeoutError, DisconnectionError) as e:
            raise TransientError("Settings store unavailable") from e

    def _get(self) -> Optional[UserSettings]:
        with self._session_factory() as db:
            row = db.query(UserSettingsORM).first()
            return self._to_domain(row) if row else None

    def _save(self, settings: UserSettings) -> UserSettings:
        with self._session_factory() as db:
            row = db.query(UserSettingsORM).first()
            if row is None:
                row = UserSettingsORM(id=str(uuid.uuid4()))
                db.add(row)
            row.initial_capital = str(settings.initial_capital)
            row.currency = settings.currency
            row.updated_at = self._clock.now()
            db.commit()
            db.refresh(row)
            return self._to_domain(row)

    @staticmethod
    def _to_domain(orm: UserSettingsORM) -> UserSettings:
        """Convert ORM model to domain model."""
        return UserSettings(
            initial_capital=orm.initial_capital,
            currency=orm.currency,
        )
