"""SQLAlchemy repository implementations."""

from cryptofolio.repositories.sqlalchemy.database import (
    Base,
    create_db_engine,
    create_session_factory,
    init_db,
)
from cryptofolio.repositories.sqlalchemy.record_store import SqlAlchemyRecordStore
from cryptofolio.repositories.sqlalchemy.settings_repo import SqlAlchemySettingsRepository

__all__ = [
    "Base",
    "create_db_engine",
    "create_session_factory",
    "init_db",
    "SqlAlchemyRecordStore",
    "SqlAlchemySettingsRepository",
]
