"""Inputs to the session state machine, one dataclass per event kind."""

import time
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Event:
    at: float = field(default_factory=time.monotonic, compare=False, kw_only=True)


@dataclass(frozen=True)
class SessionStarted(Event):
    pass


@dataclass(frozen=True)
class UserInput(Event):
    text: str


@dataclass(frozen=True)
class ConfirmYes(Event):
    pass


@dataclass(frozen=True)
class ConfirmNo(Event):
    pass


@dataclass(frozen=True)
class SelectModule(Event):
    key: str


@dataclass(frozen=True)
class SelectTopic(Event):
    key: str


@dataclass(frozen=True)
class SpeechFinished(Event):
    pass


@dataclass(frozen=True)
class MediaFailed(Event):
    presentation_id: int


@dataclass(frozen=True)
class MediaEnded(Event):
    # None = sender does not track instances (console, older clients)
    presentation_id: int | None = None


@dataclass(frozen=True)
class CloseMedia(Event):
    pass


@dataclass(frozen=True)
class IdleFired(Event):
    pass


@dataclass(frozen=True)
class PromptTimeoutFired(Event):
    pass


@dataclass(frozen=True)
class Activity(Event):
    """Touch, click or "I'm still here" with no content of its own."""


@dataclass(frozen=True)
class ResetRequested(Event):
    pass


USER_EVENTS = (
    UserInput, ConfirmYes, ConfirmNo, SelectModule, SelectTopic, CloseMedia, Activity, ResetRequested,
)


def is_user_event(event: Event) -> bool:
    """True for events caused by the visitor (these count as activity for the watchdog)."""
    return isinstance(event, USER_EVENTS)
