"""Enumerations for domain models."""

from enum import Enum


class LoadState(str, Enum):
    """Lifecycle of the portfolio working set."""

    IDLE = "IDLE"
    LOADING = "LOADING"
    READY = "READY"
    ERROR = "ERROR"


class Topic(str, Enum):
    """Event bus topics (stable contract for observers)."""

    ASSET_ADDED = "asset-added"
    ASSET_UPDATED = "asset-updated"
    ASSET_DELETED = "asset-deleted"
    PORTFOLIO_REFRESHED = "portfolio-refreshed"
    SETTINGS_UPDATED = "settings-updated"
