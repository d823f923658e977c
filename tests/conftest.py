"""Pytest fixtures and config."""

import pytest
from catalog import default_catalog
from session.state import SessionState

from tests.fakes import FakeLoop, FakeMediaPresenter, FakeSpeechActor


@pytest.fixture
def catalog():
    """Built-in kiosk catalog (2 modules, 20 topics, 3 backgrounds)."""
    return default_catalog()


@pytest.fixture
def fresh_state():
    return SessionState()


@pytest.fixture
def fake_speech():
    return FakeSpeechActor()


@pytest.fixture
def fake_presenter():
    return FakeMediaPresenter()


@pytest.fixture
def fake_loop():
    return FakeLoop()
