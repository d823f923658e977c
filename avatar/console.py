"""Terminal collaborators for ``main.py --console``: speech and media go to stdout."""

import logging

from catalog import MediaRef
from session.events import CloseMedia, ConfirmNo, ConfirmYes, Event, MediaEnded, ResetRequested, UserInput

logger = logging.getLogger(__name__)

QUIT = "/quit"

# Slash commands stand in for the kiosk page's buttons and player signals.
_COMMANDS = {
    "/yes": ConfirmYes,
    "/no": ConfirmNo,
    "/ended": MediaEnded,
    "/close": CloseMedia,
    "/reset": ResetRequested,
}


def console_event(line: str) -> Event | None:
    """Map one typed line to a session event; blank lines and unknown commands give None."""
    line = line.strip()
    if not line:
        return None
    if line.startswith("/"):
        factory = _COMMANDS.get(line.split()[0].lower())
        if factory is None:
            logger.warning("Unknown command %r (try /yes /no /ended /close /reset /quit)", line)
            return None
        return factory()
    return UserInput(line)


class ConsoleSpeechActor:
    def __init__(self, name: str = "Avatar") -> None:
        self.name = name

    async def speak(self, text: str) -> bool:
        print(f"{self.name}: {text}", flush=True)
        return True

    async def respond(self, text: str) -> bool:
        # No knowledge base in the terminal; the scripted fallback is spoken instead.
        return False

    async def stop(self) -> None:
        print(f"{self.name}: (stops talking)", flush=True)


class ConsoleMediaPresenter:
    """Prints what would be shown; type /ended or /close to finish playback."""

    async def present(self, module_key: str, media: MediaRef, presentation_id: int) -> bool:
        target = media.video_id or media.url
        print(f"[media #{presentation_id}] {module_key}: {media.kind} {target}", flush=True)
        return True

    async def close(self, presentation_id: int) -> None:
        print(f"[media #{presentation_id}] closed", flush=True)
