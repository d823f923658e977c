"""Bridge between FastAPI WebSocket kiosk clients and the session orchestrator.

Holds the event queue the orchestrator reads from and a broadcast set of
connected WebSocket clients.  Inbound messages (typed text, transcripts,
button presses, player signals) become session events; outbound, the bridge
carries captions, status and display effects.  It also provides the
browser-backed speech actor and media presenter used by ``--serve`` when no
HeyGen key is configured: the kiosk page speaks and plays media itself.
"""

import asyncio
import json
import logging
import threading
from typing import Any

from fastapi import WebSocket

from catalog import MediaRef
from session.events import (
    Activity,
    CloseMedia,
    ConfirmNo,
    ConfirmYes,
    Event,
    MediaEnded,
    ResetRequested,
    SelectModule,
    SelectTopic,
    SessionStarted,
    UserInput,
)

logger = logging.getLogger(__name__)


class Bridge:
    """Glue between WebSocket clients and the orchestrator loop."""

    def __init__(self) -> None:
        # asyncio.Queue shared with the orchestrator (session events)
        self._event_queue: asyncio.Queue[Event] | None = None
        # Connected WebSocket clients
        self._clients: set[WebSocket] = set()
        self._clients_lock = threading.Lock()
        # Orchestrator bound by run_orchestrator (for snapshots / catalog)
        self.orchestrator: Any | None = None
        # Queue SessionStarted when the first client connects (see start_session_on_connect)
        self._start_on_connect = False
        # Streaming avatar connection details for the page (HeyGen url/access_token)
        self.avatar_session: dict[str, Any] | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def set_event_queue(self, q: asyncio.Queue[Event]) -> None:
        self._event_queue = q

    def set_orchestrator(self, orchestrator: Any) -> None:
        self.orchestrator = orchestrator

    def start_session_on_connect(self) -> None:
        """Hold the greeting until a kiosk page is there to play it."""
        self._start_on_connect = True

    def set_avatar_session(self, info: dict[str, Any] | None) -> None:
        """Keep only what the page needs to attach to the avatar stream."""
        if not info:
            self.avatar_session = None
            return
        self.avatar_session = {
            "session_id": info.get("session_id"),
            "url": info.get("url"),
            "access_token": info.get("access_token"),
        }

    @property
    def event_queue(self) -> asyncio.Queue[Event]:
        if self._event_queue is None:
            raise RuntimeError("Bridge.event_queue not set; call set_event_queue first")
        return self._event_queue

    # ------------------------------------------------------------------
    # Client management
    # ------------------------------------------------------------------

    def add_client(self, ws: WebSocket) -> None:
        with self._clients_lock:
            self._clients.add(ws)
        logger.info("WS client connected (%d total)", len(self._clients))
        if self._start_on_connect and self._event_queue is not None:
            self._start_on_connect = False
            self._event_queue.put_nowait(SessionStarted())
            logger.info("First kiosk client connected; starting session")

    def remove_client(self, ws: WebSocket) -> None:
        with self._clients_lock:
            self._clients.discard(ws)
        logger.info("WS client disconnected (%d total)", len(self._clients))

    @property
    def client_count(self) -> int:
        with self._clients_lock:
            return len(self._clients)

    # ------------------------------------------------------------------
    # Broadcasting (server → all clients)
    # ------------------------------------------------------------------

    async def _send_json(self, ws: WebSocket, data: dict) -> None:
        try:
            await ws.send_json(data)
        except Exception:
            self.remove_client(ws)

    async def broadcast(self, data: dict) -> int:
        """Send JSON payload to every connected client; returns how many were targeted."""
        with self._clients_lock:
            targets = list(self._clients)
        if not targets:
            return 0
        await asyncio.gather(*(self._send_json(ws, data) for ws in targets))
        return len(targets)

    # Convenience helpers for common message types -----------------------

    async def send_status(self, status: str) -> None:
        await self.broadcast({"type": "status", "status": status})

    async def send_reply(self, text: str) -> None:
        await self.broadcast({"type": "reply", "text": text})

    async def send_error(self, message: str) -> None:
        await self.broadcast({"type": "error", "message": message})

    # ------------------------------------------------------------------
    # Inbound: client → orchestrator
    # ------------------------------------------------------------------

    async def inject_event(self, event: Event) -> None:
        """Put a session event onto the orchestrator's queue."""
        await self.event_queue.put(event)
        logger.debug("Injected %s", type(event).__name__)

    async def inject_text(self, text: str) -> None:
        await self.inject_event(UserInput(text))

    async def handle_client_message(self, raw: str | bytes) -> None:
        """Parse and dispatch a JSON message from a WS client."""
        try:
            msg: dict[str, Any] = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.warning("Invalid WS message: %r", raw[:120] if isinstance(raw, (str, bytes)) else raw)
            return
        if not isinstance(msg, dict):
            logger.warning("Invalid WS message (not an object): %r", msg)
            return

        msg_type = msg.get("type") or ""
        event = self._event_for(msg_type, msg)
        if event is None:
            logger.debug("Ignored WS message type: %r", msg_type)
            return
        await self.inject_event(event)

    @staticmethod
    def _event_for(msg_type: str, msg: dict[str, Any]) -> Event | None:
        if msg_type == "text":
            text = (msg.get("text") or "").strip()
            return UserInput(text) if text else None
        if msg_type == "confirm":
            answer = str(msg.get("answer", "")).lower()
            if answer == "yes":
                return ConfirmYes()
            if answer == "no":
                return ConfirmNo()
            return None
        if msg_type == "select_module" and msg.get("key"):
            return SelectModule(str(msg["key"]))
        if msg_type == "select_topic" and msg.get("key"):
            return SelectTopic(str(msg["key"]))
        if msg_type == "media_ended":
            pid = msg.get("presentation_id")
            return MediaEnded(int(pid) if isinstance(pid, (int, str)) and str(pid).isdigit() else None)
        if msg_type == "close_media":
            return CloseMedia()
        if msg_type == "activity":
            return Activity()
        if msg_type == "reset":
            return ResetRequested()
        return None


class BridgeSpeechActor:
    """Speech actor that asks the kiosk page to speak (browser speech synthesis).

    The page cannot answer open questions, so ``respond`` always declines and
    the orchestrator falls back to its scripted line.
    """

    def __init__(self, bridge: Bridge) -> None:
        self.bridge = bridge

    async def speak(self, text: str) -> bool:
        return await self.bridge.broadcast({"type": "speak", "text": text}) > 0

    async def respond(self, text: str) -> bool:
        return False

    async def stop(self) -> None:
        await self.bridge.broadcast({"type": "stop_speech"})


class BridgeMediaPresenter:
    """Media presenter that embeds videos in the kiosk page; "ended" comes back as a WS message."""

    def __init__(self, bridge: Bridge) -> None:
        self.bridge = bridge

    async def present(self, module_key: str, media: MediaRef, presentation_id: int) -> bool:
        sent = await self.bridge.broadcast({
            "type": "present_media",
            "module": module_key,
            "kind": media.kind,
            "url": media.url,
            "video_id": media.video_id,
            "presentation_id": presentation_id,
        })
        return sent > 0

    async def close(self, presentation_id: int) -> None:
        await self.bridge.broadcast({"type": "hide_media", "presentation_id": presentation_id})


# Module-level singleton
bridge = Bridge()
