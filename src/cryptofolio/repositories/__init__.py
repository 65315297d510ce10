"""Repository layer - data access abstractions and implementations."""

from cryptofolio.repositories.protocols import (
    RecordStore,
    SettingsRepository,
)
from cryptofolio.repositories.local_settings import LocalSettingsStore

__all__ = [
    "RecordStore",
    "SettingsRepository",
    "LocalSettingsStore",
]
