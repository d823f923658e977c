"""Outputs of the session state machine and their WebSocket message form."""

from dataclasses import dataclass

from catalog import MediaRef


@dataclass(frozen=True)
class Effect:
    pass


@dataclass(frozen=True)
class Speak(Effect):
    text: str


@dataclass(frozen=True)
class Respond(Effect):
    """Free-form answer by the speech actor; ``fallback`` is spoken if it cannot answer."""

    text: str
    fallback: str


@dataclass(frozen=True)
class Pause(Effect):
    delay_ms: int


@dataclass(frozen=True)
class AwaitSpeech(Effect):
    """Wait out the speaking estimate, then feed SpeechFinished back in."""

    delay_ms: int


@dataclass(frozen=True)
class RequestConfirm(Effect):
    module_key: str
    title: str


@dataclass(frozen=True)
class HideConfirm(Effect):
    pass


@dataclass(frozen=True)
class ShowMenu(Effect):
    choices: tuple[str, ...] = ("modules", "topics")


@dataclass(frozen=True)
class HideMenu(Effect):
    pass


@dataclass(frozen=True)
class PresentMedia(Effect):
    module_key: str
    media: MediaRef
    presentation_id: int


@dataclass(frozen=True)
class HideMedia(Effect):
    presentation_id: int


@dataclass(frozen=True)
class SetBackground(Effect):
    key: str
    image_ref: str


@dataclass(frozen=True)
class ShowIdlePrompt(Effect):
    text: str


@dataclass(frozen=True)
class HideIdlePrompt(Effect):
    pass


@dataclass(frozen=True)
class StopSpeech(Effect):
    pass


@dataclass(frozen=True)
class ShowWelcome(Effect):
    pass


def to_message(effect: Effect) -> dict | None:
    """Client message for display-only effects; None for effects handled by collaborators."""
    if isinstance(effect, RequestConfirm):
        return {"type": "confirm", "module": effect.module_key, "title": effect.title}
    if isinstance(effect, HideConfirm):
        return {"type": "confirm_hide"}
    if isinstance(effect, ShowMenu):
        return {"type": "menu", "choices": list(effect.choices)}
    if isinstance(effect, HideMenu):
        return {"type": "menu_hide"}
    if isinstance(effect, SetBackground):
        return {"type": "background", "key": effect.key, "image": effect.image_ref}
    if isinstance(effect, ShowIdlePrompt):
        return {"type": "idle_prompt", "text": effect.text}
    if isinstance(effect, HideIdlePrompt):
        return {"type": "idle_prompt_hide"}
    if isinstance(effect, ShowWelcome):
        return {"type": "welcome"}
    return None
