"""Unit tests for session.machine – the pure transition function."""

from dataclasses import replace

import pytest
from config import prompts, settings
from session.effects import (
    AwaitSpeech,
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
)
from session.machine import (
    SPEECH_MAX_MS,
    SPEECH_MIN_MS,
    classify_confirmation,
    estimate_speech_ms,
    transition,
)
from session.state import Phase, SessionState


def _in(phase, **kwargs):
    return replace(SessionState(), phase=phase, greeted=True, **kwargs)


def _spoken(effects):
    return [e.text for e in effects if isinstance(e, Speak)]


@pytest.mark.unit
class TestSessionStart:
    def test_greets_with_pause(self, catalog, fresh_state):
        state, effects = transition(fresh_state, SessionStarted(), catalog)
        assert state.phase is Phase.AWAITING_INPUT
        assert state.greeted
        assert effects == [
            SetBackground("DEFAULT", catalog.default_background_image),
            Speak(prompts.GREETING_LINES[0]),
            Pause(settings.GREETING_PAUSE_MS),
            Speak(prompts.GREETING_LINES[1]),
        ]

    def test_greets_only_once(self, catalog, fresh_state):
        state, _ = transition(fresh_state, SessionStarted(), catalog)
        state, _ = transition(state, ResetRequested(), catalog)
        state, effects = transition(state, SessionStarted(), catalog)
        assert state.phase is Phase.AWAITING_INPUT
        assert _spoken(effects) == []


@pytest.mark.unit
class TestInput:
    def test_background_switch(self, catalog):
        state, effects = transition(_in(Phase.AWAITING_INPUT), UserInput("I study at Stanford"), catalog)
        assert state.phase is Phase.AWAITING_INPUT
        assert state.current_background == "STANFORD"
        assert effects == [
            SetBackground("STANFORD", "/assets/stanford-university-title.jpg"),
            Speak("Glad to hear from the great Stanford."),
            Speak(prompts.MENU_QUESTION),
            ShowMenu(),
        ]

    def test_background_beats_module(self, catalog):
        state, _ = transition(_in(Phase.AWAITING_INPUT), UserInput("oxford module 1"), catalog)
        assert state.current_background == "OXFORD"
        assert state.pending_module_key is None

    def test_module_speaks_summary(self, catalog):
        module = catalog.module("module 1")
        state, effects = transition(_in(Phase.AWAITING_INPUT), UserInput("finance please"), catalog)
        assert state.phase is Phase.SPEAKING
        assert state.pending_module_key == "module 1"
        assert effects == [HideMenu(), Speak(module.summary), AwaitSpeech(estimate_speech_ms(module.summary))]

    def test_topic(self, catalog):
        topic = catalog.topic("retail")
        state, effects = transition(_in(Phase.AWAITING_INPUT), UserInput("retail"), catalog)
        assert state.phase is Phase.SPEAKING
        assert state.pending_module_key is None
        assert effects == [
            HideMenu(),
            Speak(prompts.TOPIC_ANSWER.format(summary=topic.summary, url=topic.url)),
            Speak(prompts.TOPIC_FOLLOW_UP),
            ShowMenu(),
            AwaitSpeech(0),
        ]
        state, effects = transition(state, SpeechFinished(), catalog)
        assert state.phase is Phase.AWAITING_INPUT
        assert effects == []

    def test_unresolved_asks_avatar(self, catalog):
        state, effects = transition(_in(Phase.AWAITING_INPUT), UserInput("the weather today"), catalog)
        assert state.phase is Phase.SPEAKING
        assert effects == [Respond("the weather today", prompts.NOT_ENOUGH_INFO), AwaitSpeech(0)]

    def test_blank_input_ignored(self, catalog):
        start = _in(Phase.AWAITING_INPUT)
        state, effects = transition(start, UserInput("   "), catalog)
        assert effects == []
        assert state.phase is Phase.AWAITING_INPUT

    def test_input_at_welcome(self, catalog):
        state, _ = transition(_in(Phase.WELCOME), UserInput("module 2"), catalog)
        assert state.phase is Phase.SPEAKING
        assert state.pending_module_key == "module 2"

    def test_records_activity_time(self, catalog):
        state, _ = transition(_in(Phase.AWAITING_INPUT), UserInput("hello", at=12.5), catalog)
        assert state.last_activity_at == 12.5

    def test_select_topic_button(self, catalog):
        state, effects = transition(_in(Phase.AWAITING_INPUT), SelectTopic("hcm"), catalog)
        assert state.phase is Phase.SPEAKING
        assert catalog.topic("hcm").summary in _spoken(effects)[0]

    def test_select_unknown_module(self, catalog):
        state, effects = transition(_in(Phase.AWAITING_INPUT), SelectModule("module 9"), catalog)
        assert state.phase is Phase.AWAITING_INPUT
        assert _spoken(effects) == [prompts.NOT_ENOUGH_INFO_SHORT]


@pytest.mark.unit
class TestConfirmation:
    def _speaking(self, catalog):
        state, _ = transition(_in(Phase.AWAITING_INPUT), UserInput("module 1"), catalog)
        return state

    def test_speech_finished_requests_confirm(self, catalog):
        state, effects = transition(self._speaking(catalog), SpeechFinished(), catalog)
        assert state.phase is Phase.AWAITING_CONFIRM
        assert effects == [RequestConfirm("module 1", catalog.module("module 1").title)]

    def test_yes_presents(self, catalog):
        state = _in(Phase.AWAITING_CONFIRM, pending_module_key="module 1")
        state, effects = transition(state, ConfirmYes(), catalog)
        assert state.phase is Phase.PRESENTING_MEDIA
        assert state.pending_module_key is None
        assert state.presentation_id == 1
        assert effects == [HideConfirm(), PresentMedia("module 1", catalog.module("module 1").media, 1)]

    def test_no_skips(self, catalog):
        state = _in(Phase.AWAITING_CONFIRM, pending_module_key="module 1")
        state, effects = transition(state, ConfirmNo(), catalog)
        assert state.phase is Phase.AWAITING_INPUT
        assert state.pending_module_key is None
        assert effects == [HideConfirm(), Speak(prompts.SKIP_VIDEO)]

    def test_yes_outside_confirm_ignored(self, catalog):
        state, effects = transition(_in(Phase.AWAITING_INPUT), ConfirmYes(), catalog)
        assert state.phase is Phase.AWAITING_INPUT
        assert effects == []

    @pytest.mark.parametrize("text,phase", [
        ("yes please", Phase.PRESENTING_MEDIA),
        ("Sure!", Phase.PRESENTING_MEDIA),
        ("no thanks", Phase.AWAITING_INPUT),
    ])
    def test_typed_answers(self, catalog, text, phase):
        state = _in(Phase.AWAITING_CONFIRM, pending_module_key="module 2")
        state, _ = transition(state, UserInput(text), catalog)
        assert state.phase is phase

    def test_new_request_cancels_confirm(self, catalog):
        state = _in(Phase.AWAITING_CONFIRM, pending_module_key="module 1")
        state, effects = transition(state, UserInput("retail"), catalog)
        assert effects[0] == HideConfirm()
        assert state.pending_module_key is None
        assert state.phase is Phase.SPEAKING

    def test_play_other_module_switches(self, catalog):
        state = _in(Phase.AWAITING_CONFIRM, pending_module_key="module 1")
        state, effects = transition(state, UserInput("play module 2"), catalog)
        assert effects[0] == HideConfirm()
        assert not any(isinstance(e, PresentMedia) for e in effects)
        assert Speak(catalog.module("module 2").summary) in effects
        assert state.phase is Phase.SPEAKING
        assert state.pending_module_key == "module 2"

    def test_no_with_new_request_switches(self, catalog):
        state = _in(Phase.AWAITING_CONFIRM, pending_module_key="module 1")
        state, effects = transition(state, UserInput("No, show me payroll"), catalog)
        assert effects[0] == HideConfirm()
        assert Speak(prompts.SKIP_VIDEO) not in effects
        assert state.pending_module_key == "module 2"

    def test_play_pending_module_is_yes(self, catalog):
        state = _in(Phase.AWAITING_CONFIRM, pending_module_key="module 1")
        state, effects = transition(state, UserInput("play module 1"), catalog)
        assert state.phase is Phase.PRESENTING_MEDIA
        assert effects == [HideConfirm(), PresentMedia("module 1", catalog.module("module 1").media, 1)]

    def test_answer_with_topic_switches(self, catalog):
        state = _in(Phase.AWAITING_CONFIRM, pending_module_key="module 1")
        state, effects = transition(state, UserInput("ok but what about retail"), catalog)
        assert effects[0] == HideConfirm()
        assert not any(isinstance(e, PresentMedia) for e in effects)
        assert state.phase is Phase.SPEAKING
        assert state.pending_module_key is None


@pytest.mark.unit
class TestMedia:
    def _presenting(self):
        return _in(Phase.PRESENTING_MEDIA, presentation_id=1, current_background="HARVARD")

    def test_ended(self, catalog):
        state, effects = transition(self._presenting(), MediaEnded(1), catalog)
        assert state.phase is Phase.AWAITING_INPUT
        assert state.current_background == "DEFAULT"
        assert effects == [
            HideMedia(1),
            SetBackground("DEFAULT", catalog.default_background_image),
            Speak(prompts.MEDIA_FINISHED),
        ]

    def test_ended_without_id(self, catalog):
        state, _ = transition(self._presenting(), MediaEnded(), catalog)
        assert state.phase is Phase.AWAITING_INPUT

    def test_stale_end_ignored(self, catalog):
        state, effects = transition(self._presenting(), MediaEnded(0), catalog)
        assert state.phase is Phase.PRESENTING_MEDIA
        assert effects == []

    def test_closed(self, catalog):
        state, effects = transition(self._presenting(), CloseMedia(), catalog)
        assert state.phase is Phase.AWAITING_INPUT
        assert _spoken(effects) == [prompts.MEDIA_CLOSED]

    def test_failed(self, catalog):
        state, effects = transition(self._presenting(), MediaFailed(1), catalog)
        assert state.phase is Phase.AWAITING_INPUT
        assert effects == [HideMedia(1), Speak(prompts.MEDIA_LOAD_FAILED)]

    def test_input_during_media_hides_it(self, catalog):
        state, effects = transition(self._presenting(), SelectModule("module 2"), catalog)
        assert effects[0] == HideMedia(1)
        assert state.phase is Phase.SPEAKING
        assert state.pending_module_key == "module 2"

    def test_second_presentation_gets_new_id(self, catalog):
        state = _in(Phase.AWAITING_CONFIRM, pending_module_key="module 2", presentation_id=4)
        state, _ = transition(state, ConfirmYes(), catalog)
        assert state.presentation_id == 5


@pytest.mark.unit
class TestInactivity:
    def test_idle_prompt(self, catalog):
        state, effects = transition(_in(Phase.AWAITING_INPUT), IdleFired(), catalog)
        assert state.phase is Phase.IDLE_PROMPT
        assert state.resume_phase is Phase.AWAITING_INPUT
        assert effects == [ShowIdlePrompt("Are you still there?")]

    def test_idle_ignored_while_presenting(self, catalog):
        state, effects = transition(_in(Phase.PRESENTING_MEDIA), IdleFired(), catalog)
        assert state.phase is Phase.PRESENTING_MEDIA
        assert effects == []

    def test_activity_resumes(self, catalog):
        state, _ = transition(_in(Phase.AWAITING_INPUT), IdleFired(), catalog)
        state, effects = transition(state, Activity(), catalog)
        assert state.phase is Phase.AWAITING_INPUT
        assert state.resume_phase is None
        assert effects == [HideIdlePrompt()]

    def test_input_resumes_and_is_handled(self, catalog):
        state, _ = transition(_in(Phase.AWAITING_INPUT), IdleFired(), catalog)
        state, effects = transition(state, UserInput("retail"), catalog)
        assert effects[0] == HideIdlePrompt()
        assert state.phase is Phase.SPEAKING

    def test_confirm_survives_idle(self, catalog):
        state = _in(Phase.AWAITING_CONFIRM, pending_module_key="module 1")
        state, _ = transition(state, IdleFired(), catalog)
        state, effects = transition(state, ConfirmYes(), catalog)
        assert state.phase is Phase.PRESENTING_MEDIA
        assert effects[0] == HideIdlePrompt()

    def test_prompt_timeout_resets(self, catalog):
        state, _ = transition(_in(Phase.AWAITING_INPUT, current_background="OXFORD"), IdleFired(), catalog)
        state, effects = transition(state, PromptTimeoutFired(), catalog)
        assert state.phase is Phase.WELCOME
        assert state.greeted
        assert state.current_background == "DEFAULT"
        assert StopSpeech() in effects
        assert effects[-1] == ShowWelcome()
        assert not any(isinstance(e, HideMedia) for e in effects)

    def test_prompt_timeout_outside_prompt_ignored(self, catalog):
        state, effects = transition(_in(Phase.AWAITING_INPUT), PromptTimeoutFired(), catalog)
        assert state.phase is Phase.AWAITING_INPUT
        assert effects == []

    def test_reset_while_presenting_hides_media(self, catalog):
        state, effects = transition(_in(Phase.PRESENTING_MEDIA, presentation_id=2), ResetRequested(), catalog)
        assert state.phase is Phase.WELCOME
        assert HideMedia(2) in effects


@pytest.mark.unit
class TestHelpers:
    @pytest.mark.parametrize("text,expected", [
        ("yes", True),
        ("Okay go ahead", True),
        ("play it", True),
        ("no", False),
        ("not now", False),
        ("skip", False),
        ("no thank you", False),
        ("what is payroll", None),
        ("yesterday", None),
        ("play module 2", None),
        ("no, show me payroll", None),
    ])
    def test_classify_confirmation(self, text, expected):
        assert classify_confirmation(text) is expected

    def test_speech_estimate_clamped(self):
        assert estimate_speech_ms("") == SPEECH_MIN_MS
        assert estimate_speech_ms("word " * 100) == SPEECH_MAX_MS
        assert SPEECH_MIN_MS < estimate_speech_ms("one two three four five") < SPEECH_MAX_MS
