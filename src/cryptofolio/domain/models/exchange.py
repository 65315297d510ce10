"""Exchange domain model."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class Exchange:
    """
    A named venue or account grouping a user's holdings.

    Identity is assigned by the record store.
    """

    id: str
    name: str
    created_at: Optional[datetime] = field(default=None)


@dataclass
class ExchangeCreate:
    """Input data for creating an exchange."""

    name: str


@dataclass
class ExchangeUpdate:
    """Partial update data for editing an exchange."""

    name: Optional[str] = None
