"""Online/offline detection."""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

Listener = Callable[[bool], None]


class ConnectivityMonitor:
    """
    Tracks whether the client is offline.

    State changes come from set_offline() (explicit signal) or from check(),
    which probes a TCP endpoint. Listeners are called with the new offline
    flag on every transition.
    """

    def __init__(
        self,
        probe_host: str = "1.1.1.1",
        probe_port: int = 53,
        timeout_seconds: float = 3.0,
        offline: bool = False,
    ):
        self._probe_host = probe_host
        self._probe_port = probe_port
        self._timeout = timeout_seconds
        self._offline = offline
        self._listeners: list[Listener] = []
        self._watch_task: Optional[asyncio.Task] = None

    @property
    def is_offline(self) -> bool:
        return self._offline

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Register listener; returns a function that removes it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def set_offline(self, offline: bool) -> None:
        if offline == self._offline:
            return
        self._offline = offline
        logger.info("Connectivity changed: %s", "offline" if offline else "online")
        for listener in list(self._listeners):
            try:
                listener(offline)
            except Exception:
                logger.exception("Error in connectivity listener")

    async def check(self) -> bool:
        """Probe the network once; updates state and returns True if online."""
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(self._probe_host, self._probe_port),
                timeout=self._timeout,
            )
        except (OSError, asyncio.TimeoutError):
            self.set_offline(True)
            return False
        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            logger.debug("Probe socket close failed: %s", e)
        self.set_offline(False)
        return True

    def start_watching(self, interval_seconds: float) -> None:
        """Probe periodically in the background until stop_watching()."""
        if self._watch_task is None or self._watch_task.done():
            self._watch_task = asyncio.get_running_loop().create_task(self._watch(interval_seconds))

    async def stop_watching(self) -> None:
        if self._watch_task is None:
            return
        self._watch_task.cancel()
        try:
            await self._watch_task
        except asyncio.CancelledError:
            pass
        self._watch_task = None

    async def _watch(self, interval_seconds: float) -> None:
        while True:
            await self.check()
            await asyncio.sleep(interval_seconds)
