"""Domain layer - pure business models with no external dependencies."""

from cryptofolio.domain.models import (
    Exchange,
    Asset,
    UserSettings,
    LoadState,
    Topic,
)

__all__ = [
    "Exchange",
    "Asset",
    "UserSettings",
    "LoadState",
    "Topic",
]
