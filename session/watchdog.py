"""Two-stage inactivity timer: idle cue, then reset if nobody answers it.

    reset ──idle_timeout──> on_idle ──prompt_timeout──> on_prompt_timeout

Any ``reset`` cancels whichever stage is pending and restarts the first.
Runs on the event loop's timers (``call_later``) so nothing blocks; the
callbacks are expected to just enqueue an event for the orchestrator.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WatchdogConfig:
    idle_timeout_ms: int = 30_000
    prompt_timeout_ms: int = 10_000


class Watchdog:
    """Idle/prompt watchdog; ``loop`` only needs ``call_later`` (tests pass a manual clock)."""

    def __init__(
        self,
        config: WatchdogConfig,
        on_idle: Callable[[], None],
        on_prompt_timeout: Callable[[], None],
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.config = config
        self._on_idle = on_idle
        self._on_prompt_timeout = on_prompt_timeout
        self._loop = loop
        self._idle_handle: asyncio.TimerHandle | None = None
        self._prompt_handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> str | None:
        """Which stage is armed: "idle", "prompt", or None."""
        if self._idle_handle is not None:
            return "idle"
        if self._prompt_handle is not None:
            return "prompt"
        return None

    def start(self) -> "Watchdog":
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        self.reset()
        logger.debug(
            "Watchdog started (idle %d ms, prompt %d ms)",
            self.config.idle_timeout_ms, self.config.prompt_timeout_ms,
        )
        return self

    def reset(self) -> None:
        """Activity seen: cancel both stages and re-arm the idle stage."""
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        self._cancel()
        self._idle_handle = self._loop.call_later(self.config.idle_timeout_ms / 1000, self._fire_idle)

    def stop(self) -> None:
        """Cancel both stages unconditionally (session teardown)."""
        self._cancel()

    def _cancel(self) -> None:
        if self._idle_handle is not None:
            self._idle_handle.cancel()
            self._idle_handle = None
        if self._prompt_handle is not None:
            self._prompt_handle.cancel()
            self._prompt_handle = None

    def _fire_idle(self) -> None:
        self._idle_handle = None
        # Arm the second stage first so a failing callback cannot strand the kiosk.
        self._prompt_handle = self._loop.call_later(self.config.prompt_timeout_ms / 1000, self._fire_prompt)
        logger.info("No activity for %d ms", self.config.idle_timeout_ms)
        self._on_idle()

    def _fire_prompt(self) -> None:
        self._prompt_handle = None
        logger.info("Idle prompt unanswered for %d ms", self.config.prompt_timeout_ms)
        self._on_prompt_timeout()


def start_watchdog(
    config: WatchdogConfig,
    on_idle: Callable[[], None],
    on_prompt_timeout: Callable[[], None],
    loop: asyncio.AbstractEventLoop | None = None,
) -> Watchdog:
    """Create and arm a watchdog; the returned handle exposes ``reset()`` and ``stop()``."""
    return Watchdog(config, on_idle, on_prompt_timeout, loop=loop).start()
