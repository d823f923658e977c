"""Session phase enum and the single immutable SessionState value."""

from dataclasses import dataclass
from enum import Enum

from catalog import DEFAULT_BACKGROUND


class Phase(Enum):
    WELCOME = "welcome"
    AWAITING_INPUT = "awaiting_input"
    SPEAKING = "speaking"
    AWAITING_CONFIRM = "awaiting_confirm"
    PRESENTING_MEDIA = "presenting_media"
    IDLE_PROMPT = "idle_prompt"


@dataclass(frozen=True)
class SessionState:
    """Conversation state owned by the orchestrator; transitions return a new value.

    ``greeted`` only ever goes False -> True.  ``resume_phase`` is set while
    idling so activity can restore the interrupted phase.  ``presentation_id``
    identifies the current media instance so late "ended" signals are ignored.
    """

    phase: Phase = Phase.WELCOME
    pending_module_key: str | None = None
    current_background: str = DEFAULT_BACKGROUND
    greeted: bool = False
    last_activity_at: float = 0.0
    resume_phase: Phase | None = None
    presentation_id: int = 0

    def snapshot(self) -> dict:
        return {
            "phase": self.phase.value,
            "pending_module": self.pending_module_key,
            "background": self.current_background,
            "greeted": self.greeted,
            "last_activity_at": self.last_activity_at,
            "resume_phase": self.resume_phase.value if self.resume_phase else None,
            "presentation_id": self.presentation_id,
        }
