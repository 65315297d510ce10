"""User settings domain model."""

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass
class UserSettings:
    """Per-user valuation baseline."""

    initial_capital: Decimal = field(default_factory=lambda: Decimal("0"))
    currency: str = "USD"

    def __post_init__(self) -> None:
        if not isinstance(self.initial_capital, Decimal):
            self.initial_capital = Decimal(str(self.initial_capital))
