"""Async kiosk orchestrator: event queue → state machine → effects on speech, media and display.

One consumer drains the event queue.  Each event is applied to completion
(state transition, every effect, and any follow-up events such as the end of
the speaking estimate or a media load failure) before the next one is taken,
so a second utterance that arrives while the avatar is still talking waits in
the queue instead of interleaving with the first.

Collaborators are duck-typed:
  speech    – ``async speak(text) -> bool``, ``async respond(text) -> bool``,
              ``async stop()``
  presenter – ``async present(module_key, media, presentation_id) -> bool``,
              ``async close(presentation_id)``
  bridge    – optional WebSocket bridge (captions, status, display effects)

Collaborator failures never end the session: they are logged and turned into
a spoken fallback or an on-screen error.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable

from catalog import Catalog
from config import settings
from session.effects import (
    AwaitSpeech,
    Effect,
    HideMedia,
    Pause,
    PresentMedia,
    Respond,
    Speak,
    StopSpeech,
    to_message,
)
from session.events import (
    Event,
    IdleFired,
    MediaEnded,
    MediaFailed,
    PromptTimeoutFired,
    SessionStarted,
    SpeechFinished,
    is_user_event,
)
from session.machine import transition
from session.state import Phase, SessionState
from session.watchdog import Watchdog, WatchdogConfig

logger = logging.getLogger(__name__)


def _log_status(status: str) -> None:
    """Default status callback: phase changes only go to the log."""
    logger.debug("Status: %s", status)


def default_watchdog_config() -> WatchdogConfig:
    return WatchdogConfig(
        idle_timeout_ms=settings.IDLE_TIMEOUT_MS,
        prompt_timeout_ms=settings.PROMPT_TIMEOUT_MS,
    )


class KioskOrchestrator:
    """Owns the SessionState for one kiosk conversation and drives its collaborators."""

    def __init__(
        self,
        catalog: Catalog,
        speech: object,
        presenter: object,
        event_queue: asyncio.Queue | None = None,
        bridge: object | None = None,
        watchdog_config: WatchdogConfig | None = None,
        status_callback: Callable[[str], Awaitable[None] | None] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        media_fallback_sec: float | None = None,
        greet_on_start: bool = True,
    ) -> None:
        self.catalog = catalog
        self.speech = speech
        self.presenter = presenter
        self.bridge = bridge
        self.queue: asyncio.Queue = event_queue if event_queue is not None else asyncio.Queue()
        self.state = SessionState()
        self._status_cb = status_callback or _log_status
        self._sleep = sleep
        self._greet_on_start = greet_on_start
        self._media_fallback_sec = (
            settings.MEDIA_FALLBACK_SEC if media_fallback_sec is None else media_fallback_sec
        )
        self._lock = asyncio.Lock()
        self._media_timer: asyncio.TimerHandle | None = None
        self._watchdog = Watchdog(
            watchdog_config or default_watchdog_config(),
            on_idle=lambda: self.submit(IdleFired()),
            on_prompt_timeout=lambda: self.submit(PromptTimeoutFired()),
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Run the session-start transition (greeting).

        With ``greet_on_start=False`` the session stays on the welcome screen
        until someone submits SessionStarted (the bridge does so when the
        first kiosk page connects).
        """
        if self._greet_on_start:
            await self.dispatch(SessionStarted())

    async def run(self) -> None:
        """Start, then apply queued events one at a time until cancelled."""
        try:
            await self.start()
            while True:
                event = await self.queue.get()
                try:
                    await self.dispatch(event)
                finally:
                    self.queue.task_done()
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        self._watchdog.stop()
        self._cancel_media_timer()
        logger.info("Kiosk session closed in phase %s", self.state.phase.value)

    def snapshot(self) -> dict:
        return self.state.snapshot()

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def submit(self, event: Event) -> None:
        """Queue an event (timer callbacks, bridge, console)."""
        self.queue.put_nowait(event)

    async def dispatch(self, event: Event) -> None:
        """Apply ``event`` and everything it triggers before returning."""
        async with self._lock:
            await self._apply(event)

    async def _apply(self, event: Event) -> None:
        previous = self.state.phase
        self.state, effects = transition(self.state, event, self.catalog)
        if self.state.phase is not previous:
            logger.info("Phase %s -> %s on %s", previous.value, self.state.phase.value, type(event).__name__)
            result = self._status_cb(self.state.phase.value)
            if inspect.isawaitable(result):
                await result

        if self.state.phase is Phase.WELCOME:
            # Attract screen: nothing to time out until the next visitor.
            self._watchdog.stop()
        elif isinstance(event, SessionStarted):
            self._watchdog.start()
        elif is_user_event(event):
            self._watchdog.reset()
        elif isinstance(event, IdleFired) and self.state.phase is Phase.PRESENTING_MEDIA:
            # Playback is not inactivity.
            self._watchdog.reset()

        follow_ups: list[Event] = []
        for effect in effects:
            follow_up = await self._execute(effect)
            if follow_up is not None:
                follow_ups.append(follow_up)
        for follow_up in follow_ups:
            await self._apply(follow_up)

    # ------------------------------------------------------------------
    # Effects
    # ------------------------------------------------------------------

    async def _execute(self, effect: Effect) -> Event | None:
        if isinstance(effect, Speak):
            await self._speak(effect.text)
        elif isinstance(effect, Respond):
            await self._respond(effect)
        elif isinstance(effect, Pause):
            await self._sleep(effect.delay_ms / 1000)
        elif isinstance(effect, AwaitSpeech):
            if effect.delay_ms:
                await self._sleep(effect.delay_ms / 1000)
            return SpeechFinished()
        elif isinstance(effect, PresentMedia):
            return await self._present(effect)
        elif isinstance(effect, HideMedia):
            await self._hide_media(effect.presentation_id)
        elif isinstance(effect, StopSpeech):
            await self._stop_speech()
        else:
            message = to_message(effect)
            if message is not None and self.bridge is not None:
                await self.bridge.broadcast(message)
        return None

    async def _speak(self, text: str) -> bool:
        if self.bridge is not None:
            await self.bridge.send_reply(text)
        try:
            ok = bool(await self.speech.speak(text))
        except Exception as e:
            logger.warning("Speech actor raised on speak: %s", e)
            ok = False
        if not ok:
            logger.warning("Speak failed: %r", text[:80])
            if self.bridge is not None:
                await self.bridge.send_error(f"Speak failed: {text[:80]}")
        return ok

    async def _respond(self, effect: Respond) -> None:
        try:
            ok = bool(await self.speech.respond(effect.text))
        except Exception as e:
            logger.warning("Speech actor raised on respond: %s", e)
            ok = False
        if not ok:
            logger.info("No free-form answer for %r; using fallback", effect.text[:80])
            await self._speak(effect.fallback)

    async def _stop_speech(self) -> None:
        try:
            await self.speech.stop()
        except Exception as e:
            logger.warning("Speech actor raised on stop: %s", e)

    async def _present(self, effect: PresentMedia) -> Event | None:
        try:
            ok = bool(await self.presenter.present(effect.module_key, effect.media, effect.presentation_id))
        except Exception as e:
            logger.warning("Media presenter raised for %s: %s", effect.module_key, e)
            ok = False
        if not ok:
            logger.warning("Could not present %s (%s)", effect.module_key, effect.media.kind)
            return MediaFailed(effect.presentation_id)

        self._watchdog.reset()
        self._cancel_media_timer()
        if not effect.media.signals_end:
            loop = asyncio.get_running_loop()
            self._media_timer = loop.call_later(
                self._media_fallback_sec, self.submit, MediaEnded(effect.presentation_id),
            )
            logger.debug("Media fallback armed: %.0fs for presentation %d",
                         self._media_fallback_sec, effect.presentation_id)
        return None

    async def _hide_media(self, presentation_id: int) -> None:
        self._cancel_media_timer()
        try:
            await self.presenter.close(presentation_id)
        except Exception as e:
            logger.warning("Media presenter raised on close: %s", e)

    def _cancel_media_timer(self) -> None:
        if self._media_timer is not None:
            self._media_timer.cancel()
            self._media_timer = None


async def run_orchestrator(
    catalog: Catalog,
    speech: object,
    presenter: object,
    event_queue: asyncio.Queue | None = None,
    bridge: object | None = None,
    status_callback: Callable[[str], Awaitable[None] | None] | None = None,
    greet_on_start: bool = True,
) -> None:
    """Build one kiosk session and run it until cancelled.

    Parameters
    ----------
    catalog : Catalog
        Modules, topics and backgrounds for this kiosk.
    speech, presenter : object
        Speech actor and media presenter (see module docstring).
    event_queue : asyncio.Queue, optional
        Shared queue; ``--serve`` passes the one the WebSocket bridge writes to.
    bridge : Bridge, optional
        When provided, captions, status and display effects are broadcast to
        every connected kiosk client, and the bridge is bound to this session.
    status_callback : callable, optional
        ``fn(phase)`` invoked on every phase change; awaited when it returns
        an awaitable.
    greet_on_start : bool
        False keeps the welcome screen up until SessionStarted is queued.
    """
    orchestrator = KioskOrchestrator(
        catalog,
        speech,
        presenter,
        event_queue=event_queue,
        bridge=bridge,
        status_callback=status_callback,
        greet_on_start=greet_on_start,
    )
    if bridge is not None and hasattr(bridge, "set_orchestrator"):
        bridge.set_orchestrator(orchestrator)
    await orchestrator.run()
