"""On-device settings fallback stored as a JSON file."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from cryptofolio.domain.models import UserSettings

logger = logging.getLogger(__name__)


@dataclass
class LocalSettingsRecord:
    settings: UserSettings
    pending_sync: bool = False


class LocalSettingsStore:
    """
    JSON file holding the last known settings.

    pending_sync marks a value that was saved locally but never reached the
    remote store.
    """

    def __init__(self, path: Path):
        self._path = Path(path)

    def load(self) -> Optional[LocalSettingsRecord]:
        if not self._path.exists():
            return None
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
            return LocalSettingsRecord(
                settings=UserSettings(
                    initial_capital=data.get("initial_capital", "0"),
                    currency=data.get("currency", "USD"),
                ),
                pending_sync=bool(data.get("pending_sync", False)),
            )
        except (OSError, ValueError, ArithmeticError) as e:
            logger.error("Could not read local settings from %s: %s", self._path, e)
            return None

    def save(self, settings: UserSettings, pending_sync: bool = False) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "initial_capital": str(settings.initial_capital),
            "currency": settings.currency,
            "pending_sync": pending_sync,
        }
        tmp_path = self._path.with_suffix(".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        tmp_path.replace(self._path)
