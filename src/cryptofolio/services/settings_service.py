"""User settings service with an on-device fallback."""

import logging
from decimal import Decimal
from typing import Optional

from cryptofolio.core.exceptions import AppError
from cryptofolio.domain.models import UserSettings
from cryptofolio.repositories.local_settings import LocalSettingsStore
from cryptofolio.repositories.protocols import SettingsRepository

logger = logging.getLogger(__name__)


class UserSettingsService:
    """
    Reads and writes the initial capital baseline.

    The remote repository is authoritative. The local store is written on
    every update and used only when the remote store is unreachable; a value
    saved while the remote was down is pushed on the next successful read.
    """

    def __init__(self, remote: Optional[SettingsRepository], local: LocalSettingsStore):
        self._remote = remote
        self._local = local

    async def get_settings(self) -> UserSettings:
        local = self._local.load()

        if self._remote is not None:
            try:
                if local is not None and local.pending_sync:
                    saved = await self._remote.save(local.settings)
                    self._local.save(saved, pending_sync=False)
                    logger.info("Reconciled locally saved settings with remote store")
                    return saved

                remote = await self._remote.get()
                if remote is not None:
                    self._local.save(remote, pending_sync=False)
                    return remote
            except (AppError, OSError) as e:
                logger.warning("Remote settings unavailable, using local copy: %s", e)

        return local.settings if local is not None else UserSettings()

    async def get_initial_capital(self) -> Decimal:
        settings = await self.get_settings()
        return settings.initial_capital

    async def update_initial_capital(self, amount: Decimal) -> bool:
        """
        Save a new initial capital.

        Returns True once the value is stored locally, whether or not the
        remote store accepted it; False if it could not be stored at all.
        """
        current = self._local.load()
        currency = current.settings.currency if current is not None else "USD"
        settings = UserSettings(initial_capital=amount, currency=currency)

        try:
            self._local.save(settings, pending_sync=True)
        except OSError as e:
            logger.error("Could not save initial capital locally: %s", e)
            return False

        if self._remote is None:
            return True

        try:
            await self._remote.save(settings)
        except (AppError, OSError) as e:
            logger.warning("Initial capital saved locally only: %s", e)
            return True

        self._local.save(settings, pending_sync=False)
        return True
