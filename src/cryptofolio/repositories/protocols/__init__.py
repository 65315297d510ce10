"""Repository protocol definitions (interfaces)."""

from cryptofolio.repositories.protocols.record_store import RecordStore
from cryptofolio.repositories.protocols.settings_repo import SettingsRepository

__all__ = [
    "RecordStore",
    "SettingsRepository",
]
