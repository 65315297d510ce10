"""Settings repository protocol."""

from typing import Optional, Protocol

from cryptofolio.domain.models import UserSettings


class SettingsRepository(Protocol):
    """Interface for the remote user settings store."""

    async def get(self) -> Optional[UserSettings]:
        """Return stored settings, or None if none were saved yet."""
        ...

    async def save(self, settings: UserSettings) -> UserSettings:
        """Insert or update the settings row."""
        ...
