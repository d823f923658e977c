"""Kiosk conversation state machine.

``transition(state, event, catalog)`` is pure: it returns the next
SessionState and the ordered effects to run, and never talks to a
collaborator.  The orchestrator executes the effects and feeds follow-up
events (SpeechFinished, MediaFailed) back in before taking the next queued
input, so one transition always completes before another starts.

Resolution precedence for a fresh utterance:
  background (university) -> module -> topic -> free-form answer
"""

import logging
import re
from dataclasses import replace

from catalog import Catalog
from config import prompts, settings
from intent.background import detect_background
from intent.normalize import normalize
from intent.resolver import resolve_module, resolve_topic
from session.effects import (
    AwaitSpeech,
    Effect,
    HideConfirm,
    HideIdlePrompt,
    HideMedia,
    HideMenu,
    Pause,
    PresentMedia,
    RequestConfirm,
    Respond,
    SetBackground,
    ShowIdlePrompt,
    ShowMenu,
    ShowWelcome,
    Speak,
    StopSpeech,
)
from session.events import (
    Activity,
    CloseMedia,
    ConfirmNo,
    ConfirmYes,
    Event,
    IdleFired,
    MediaEnded,
    MediaFailed,
    PromptTimeoutFired,
    ResetRequested,
    SelectModule,
    SelectTopic,
    SessionStarted,
    SpeechFinished,
    UserInput,
    is_user_event,
)
from session.state import Phase, SessionState

logger = logging.getLogger(__name__)

# Speaking-duration estimate used to hold the confirmation until the avatar
# has (probably) finished the module summary.  The avatar does not report
# completion, so this is a heuristic: retune if the voice rate changes.
SPEECH_WORDS_PER_SEC = 2.2
SPEECH_MIN_MS = 1200
SPEECH_MAX_MS = 6000

# Answers to "shall I play it?" given by voice or keyboard instead of the
# buttons.  Matched on normalised text.
_YES = re.compile(r"^(?:yes|yeah|yep|yup|sure|ok|okay|absolutely|play(?: it)?|go ahead|do it)\b")
_NO = re.compile(r"^(?:no|nope|nah|skip(?: it)?|cancel|not now|don t|never ?mind)\b")
# Words that may follow a bare answer ("yes please", "no thank you").
_FILLER = frozenset({
    "please", "thanks", "thank", "you", "it", "sure", "ok", "okay", "yes", "no",
    "go", "ahead", "play", "do", "now", "then", "anyway", "that", "s", "fine",
})

# Events that bring the visitor back from the idle prompt.
_RESUMING_EVENTS = (UserInput, ConfirmYes, ConfirmNo, SelectModule, SelectTopic, CloseMedia, Activity)

Result = tuple[SessionState, list[Effect]]


def estimate_speech_ms(text: str) -> int:
    """Milliseconds the avatar needs for ``text`` at SPEECH_WORDS_PER_SEC, clamped."""
    words = len(text.split())
    return int(max(SPEECH_MIN_MS, min(SPEECH_MAX_MS, words / SPEECH_WORDS_PER_SEC * 1000)))


def _leading_answer(normalized: str) -> tuple[bool | None, str]:
    """Answer the utterance opens with, and whatever follows it."""
    for pattern, answer in ((_NO, False), (_YES, True)):
        m = pattern.match(normalized)
        if m:
            return answer, normalized[m.end():].strip()
    return None, normalized


def classify_confirmation(text: str) -> bool | None:
    """True for a bare affirmative reply, False for a bare negative one, None otherwise.

    "yes please" and "no thanks" are answers; "play module 2" is not.
    """
    answer, rest = _leading_answer(normalize(text))
    if answer is None or any(word not in _FILLER for word in rest.split()):
        return None
    return answer


def _confirmation_answer(state: SessionState, text: str, catalog: Catalog) -> bool | None:
    """Read ``text`` as a reply to the pending confirmation, or None for a new request."""
    answer = classify_confirmation(text)
    if answer is not None:
        return answer
    answer, _ = _leading_answer(normalize(text))
    if answer is None:
        return None
    if detect_background(text, catalog.backgrounds) is not None:
        return None
    module_key = resolve_module(text, catalog.modules)
    if module_key is not None:
        # "play module 1" while module 1 is pending is still a yes
        return True if answer and module_key == state.pending_module_key else None
    if resolve_topic(text, catalog.topics, catalog.home_topic_key, catalog.organization_name) is not None:
        return None
    return answer


def transition(state: SessionState, event: Event, catalog: Catalog) -> Result:
    """Apply one event; return the new state and the effects to execute in order."""
    if is_user_event(event):
        state = replace(state, last_activity_at=event.at)

    if state.phase is Phase.IDLE_PROMPT and isinstance(event, _RESUMING_EVENTS):
        return _resume_from_idle(state, event, catalog)

    if isinstance(event, SessionStarted):
        return _on_session_started(state, catalog)
    if isinstance(event, UserInput):
        return _on_user_input(state, event.text, catalog)
    if isinstance(event, ConfirmYes):
        return _on_confirm_yes(state, catalog)
    if isinstance(event, ConfirmNo):
        return _on_confirm_no(state)
    if isinstance(event, SelectModule):
        state, effects = _release(state)
        state, more = _start_module(state, event.key, catalog)
        return state, effects + more
    if isinstance(event, SelectTopic):
        state, effects = _release(state)
        state, more = _present_topic(state, event.key, catalog)
        return state, effects + more
    if isinstance(event, SpeechFinished):
        return _on_speech_finished(state, catalog)
    if isinstance(event, MediaFailed):
        return _on_media_failed(state, event.presentation_id)
    if isinstance(event, MediaEnded):
        return _on_media_done(state, event.presentation_id, prompts.MEDIA_FINISHED, catalog)
    if isinstance(event, CloseMedia):
        return _on_media_done(state, state.presentation_id, prompts.MEDIA_CLOSED, catalog)
    if isinstance(event, IdleFired):
        return _on_idle(state)
    if isinstance(event, PromptTimeoutFired):
        if state.phase is not Phase.IDLE_PROMPT:
            return state, []
        return _reset(state, catalog)
    if isinstance(event, ResetRequested):
        return _reset(state, catalog)
    if isinstance(event, Activity):
        return state, []
    logger.warning("Unhandled event %r in %s", event, state.phase.value)
    return state, []


# ── Session start ────────────────────────────────────────────────────

def _on_session_started(state: SessionState, catalog: Catalog) -> Result:
    effects: list[Effect] = [SetBackground(catalog.default_background, catalog.default_background_image)]
    if not state.greeted:
        first, *rest = prompts.GREETING_LINES
        effects.append(Speak(first))
        for line in rest:
            effects.extend([Pause(settings.GREETING_PAUSE_MS), Speak(line)])
    state = replace(
        state,
        phase=Phase.AWAITING_INPUT,
        greeted=True,
        current_background=catalog.default_background,
    )
    return state, effects


# ── Fresh input ──────────────────────────────────────────────────────

def _on_user_input(state: SessionState, text: str, catalog: Catalog) -> Result:
    text = (text or "").strip()
    if not text:
        return state, []

    if state.phase is Phase.AWAITING_CONFIRM:
        answer = _confirmation_answer(state, text, catalog)
        if answer is True:
            return _on_confirm_yes(state, catalog)
        if answer is False:
            return _on_confirm_no(state)

    state, effects = _release(state)
    state, more = _interpret(state, text, catalog)
    return state, effects + more


def _release(state: SessionState) -> Result:
    """Drop a pending confirmation or an open presentation so a new request can start."""
    if state.phase is Phase.AWAITING_CONFIRM:
        return replace(state, phase=Phase.AWAITING_INPUT, pending_module_key=None), [HideConfirm()]
    if state.phase is Phase.PRESENTING_MEDIA:
        return replace(state, phase=Phase.AWAITING_INPUT), [HideMedia(state.presentation_id)]
    return state, []


def _interpret(state: SessionState, text: str, catalog: Catalog) -> Result:
    background = detect_background(text, catalog.backgrounds)
    if background is not None:
        return _switch_background(state, background, catalog)

    module_key = resolve_module(text, catalog.modules)
    if module_key is not None:
        return _start_module(state, module_key, catalog)

    topic_key = resolve_topic(text, catalog.topics, catalog.home_topic_key, catalog.organization_name)
    if topic_key is not None:
        return _present_topic(state, topic_key, catalog)

    logger.debug("No catalog intent for %r; asking the avatar", text)
    state = replace(state, phase=Phase.SPEAKING, pending_module_key=None)
    return state, [Respond(text, prompts.NOT_ENOUGH_INFO), AwaitSpeech(0)]


def _switch_background(state: SessionState, key: str, catalog: Catalog) -> Result:
    entry = catalog.background(key)
    label = entry.label if entry else key.replace("_", " ").title()
    effects: list[Effect] = [
        SetBackground(key, catalog.background_image(key)),
        Speak(prompts.BACKGROUND_ACK.format(label=label)),
        Speak(prompts.MENU_QUESTION),
        ShowMenu(),
    ]
    return replace(state, phase=Phase.AWAITING_INPUT, current_background=key), effects


def _start_module(state: SessionState, key: str, catalog: Catalog) -> Result:
    module = catalog.module(key)
    if module is None:
        logger.warning("Module %r missing from catalog", key)
        return replace(state, phase=Phase.AWAITING_INPUT, pending_module_key=None), [
            Speak(prompts.NOT_ENOUGH_INFO_SHORT),
        ]
    effects: list[Effect] = [
        HideMenu(),
        Speak(module.summary),
        AwaitSpeech(estimate_speech_ms(module.summary)),
    ]
    return replace(state, phase=Phase.SPEAKING, pending_module_key=module.key), effects


def _present_topic(state: SessionState, key: str, catalog: Catalog) -> Result:
    topic = catalog.topic(key)
    if topic is None:
        logger.warning("Topic %r missing from catalog", key)
        return replace(state, phase=Phase.AWAITING_INPUT, pending_module_key=None), [
            Speak(prompts.NOT_ENOUGH_INFO_SHORT),
        ]
    effects: list[Effect] = [
        HideMenu(),
        Speak(prompts.TOPIC_ANSWER.format(summary=topic.summary, url=topic.url)),
        Speak(prompts.TOPIC_FOLLOW_UP),
        ShowMenu(),
        AwaitSpeech(0),
    ]
    return replace(state, phase=Phase.SPEAKING, pending_module_key=None), effects


def _on_speech_finished(state: SessionState, catalog: Catalog) -> Result:
    if state.phase is not Phase.SPEAKING:
        return state, []
    if state.pending_module_key is None:
        return replace(state, phase=Phase.AWAITING_INPUT), []
    module = catalog.module(state.pending_module_key)
    title = module.title if module else state.pending_module_key
    return replace(state, phase=Phase.AWAITING_CONFIRM), [RequestConfirm(state.pending_module_key, title)]


# ── Confirmation and media ───────────────────────────────────────────

def _on_confirm_yes(state: SessionState, catalog: Catalog) -> Result:
    if state.phase is not Phase.AWAITING_CONFIRM:
        return state, []
    module = catalog.module(state.pending_module_key)
    if module is None:
        logger.warning("Pending module %r missing from catalog", state.pending_module_key)
        return replace(state, phase=Phase.AWAITING_INPUT, pending_module_key=None), [
            HideConfirm(),
            Speak(prompts.MEDIA_LOAD_FAILED),
        ]
    presentation_id = state.presentation_id + 1
    state = replace(
        state,
        phase=Phase.PRESENTING_MEDIA,
        pending_module_key=None,
        presentation_id=presentation_id,
    )
    return state, [HideConfirm(), PresentMedia(module.key, module.media, presentation_id)]


def _on_confirm_no(state: SessionState) -> Result:
    if state.phase is not Phase.AWAITING_CONFIRM:
        return state, []
    return replace(state, phase=Phase.AWAITING_INPUT, pending_module_key=None), [
        HideConfirm(),
        Speak(prompts.SKIP_VIDEO),
    ]


def _on_media_failed(state: SessionState, presentation_id: int) -> Result:
    if state.phase is not Phase.PRESENTING_MEDIA or presentation_id != state.presentation_id:
        return state, []
    return replace(state, phase=Phase.AWAITING_INPUT), [
        HideMedia(presentation_id),
        Speak(prompts.MEDIA_LOAD_FAILED),
    ]


def _on_media_done(state: SessionState, presentation_id: int | None, line: str, catalog: Catalog) -> Result:
    if state.phase is not Phase.PRESENTING_MEDIA:
        return state, []
    if presentation_id is not None and presentation_id != state.presentation_id:
        logger.debug("Ignoring stale media signal %s (current %s)", presentation_id, state.presentation_id)
        return state, []
    state = replace(state, phase=Phase.AWAITING_INPUT, current_background=catalog.default_background)
    return state, [
        HideMedia(state.presentation_id),
        SetBackground(catalog.default_background, catalog.default_background_image),
        Speak(line),
    ]


# ── Inactivity ───────────────────────────────────────────────────────

def _on_idle(state: SessionState) -> Result:
    # Playback is not inactivity; the orchestrator re-arms the watchdog instead.
    if state.phase in (Phase.PRESENTING_MEDIA, Phase.IDLE_PROMPT):
        return state, []
    return replace(state, phase=Phase.IDLE_PROMPT, resume_phase=state.phase), [
        ShowIdlePrompt(prompts.IDLE_PROMPT),
    ]


def _resume_from_idle(state: SessionState, event: Event, catalog: Catalog) -> Result:
    resumed = state.resume_phase or Phase.AWAITING_INPUT
    state = replace(state, phase=resumed, resume_phase=None)
    effects: list[Effect] = [HideIdlePrompt()]
    if isinstance(event, Activity):
        return state, effects
    state, more = transition(state, event, catalog)
    return state, effects + more


def _reset(state: SessionState, catalog: Catalog) -> Result:
    """Back to the welcome screen; the one-time greeting stays spent."""
    effects: list[Effect] = [StopSpeech(), HideIdlePrompt(), HideConfirm(), HideMenu()]
    if state.phase is Phase.PRESENTING_MEDIA or state.resume_phase is Phase.PRESENTING_MEDIA:
        effects.append(HideMedia(state.presentation_id))
    effects.extend([
        SetBackground(catalog.default_background, catalog.default_background_image),
        ShowWelcome(),
    ])
    state = replace(
        state,
        phase=Phase.WELCOME,
        pending_module_key=None,
        current_background=catalog.default_background,
        resume_phase=None,
    )
    return state, effects
