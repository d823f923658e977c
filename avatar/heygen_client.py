"""HTTP client for the HeyGen streaming avatar (speech actor for ``--serve``).

Session lifecycle against ``/v1/streaming.*``:
  - create_token  (X-Api-Key)  -> short-lived access token
  - new_session   (Bearer)     -> session_id + LiveKit url/access_token for the page
  - start_session / send_task / interrupt / stop_session
  - "repeat" tasks say the text verbatim; "talk" tasks are answered by the
    avatar's own knowledge base (used for free-form questions)

The sync functions raise HeyGenError; HeyGenSpeechActor runs them in the
default executor so the orchestrator loop never blocks, and turns failures
into ``False``.
"""

import asyncio
import logging
from functools import partial
from typing import Any

import requests

from config import prompts, settings

logger = logging.getLogger(__name__)

TASK_REPEAT = "repeat"
TASK_TALK = "talk"


class HeyGenError(RuntimeError):
    """A HeyGen streaming call failed (network error or non-2xx status)."""


def _url(base_url: str, method: str) -> str:
    return f"{base_url.rstrip('/')}/v1/streaming.{method}"


def _post(url: str, headers: dict, payload: dict | None = None, timeout: float | None = None) -> dict:
    timeout = settings.HEYGEN_TIMEOUT_SEC if timeout is None else timeout
    try:
        r = requests.post(url, json=payload or {}, headers=headers, timeout=timeout)
    except requests.RequestException as e:
        raise HeyGenError(f"{url}: {e}") from e
    if not 200 <= r.status_code < 300:
        raise HeyGenError(f"{url}: HTTP {r.status_code} {r.text[:200]}")
    try:
        body = r.json()
    except ValueError:
        return {}
    if not isinstance(body, dict):
        return {}
    return body.get("data") or {}


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def create_token(api_key: str, base_url: str = settings.HEYGEN_BASE_URL) -> str:
    """Exchange the account API key for a session access token."""
    data = _post(_url(base_url, "create_token"), {"X-Api-Key": api_key})
    token = data.get("token")
    if not token:
        raise HeyGenError("create_token: response carried no token")
    return token


def new_session(
    token: str,
    base_url: str = settings.HEYGEN_BASE_URL,
    avatar_name: str = settings.HEYGEN_AVATAR_NAME,
    quality: str = settings.HEYGEN_QUALITY,
    knowledge_base: str = prompts.KNOWLEDGE_BASE,
    activity_idle_timeout: int = settings.HEYGEN_ACTIVITY_IDLE_TIMEOUT,
) -> dict[str, Any]:
    """Create a streaming session; returns HeyGen's session info (session_id, url, access_token)."""
    payload = {
        "version": "v2",
        "avatar_name": avatar_name,
        "quality": quality,
        "knowledge_base": knowledge_base,
        "activity_idle_timeout": activity_idle_timeout,
    }
    data = _post(_url(base_url, "new"), _bearer(token), payload)
    if not data.get("session_id"):
        raise HeyGenError("new_session: response carried no session_id")
    return data


def start_session(token: str, session_id: str, base_url: str = settings.HEYGEN_BASE_URL) -> None:
    _post(_url(base_url, "start"), _bearer(token), {"session_id": session_id})


def send_task(
    token: str,
    session_id: str,
    text: str,
    task_type: str = TASK_REPEAT,
    base_url: str = settings.HEYGEN_BASE_URL,
) -> None:
    if task_type not in (TASK_REPEAT, TASK_TALK):
        raise ValueError(f"task_type must be {TASK_REPEAT!r} or {TASK_TALK!r}, got {task_type!r}")
    _post(
        _url(base_url, "task"),
        _bearer(token),
        {"session_id": session_id, "text": text, "task_type": task_type},
    )


def interrupt(token: str, session_id: str, base_url: str = settings.HEYGEN_BASE_URL) -> None:
    _post(_url(base_url, "interrupt"), _bearer(token), {"session_id": session_id})


def stop_session(token: str, session_id: str, base_url: str = settings.HEYGEN_BASE_URL) -> None:
    _post(_url(base_url, "stop"), _bearer(token), {"session_id": session_id})


class HeyGenSpeechActor:
    """Speech actor backed by one HeyGen streaming session.

    ``open()`` must succeed before speaking; until then every call reports
    failure so the orchestrator shows its error banner instead of hanging.
    """

    def __init__(self, api_key: str, base_url: str = settings.HEYGEN_BASE_URL) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self._token: str | None = None
        self._session: dict[str, Any] | None = None

    @property
    def session_info(self) -> dict[str, Any] | None:
        """What the kiosk page needs to attach to the stream (url, access_token, session_id)."""
        return self._session

    @property
    def session_id(self) -> str | None:
        return self._session.get("session_id") if self._session else None

    async def _call(self, fn, *args, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(fn, *args, **kwargs))

    async def open(self) -> bool:
        try:
            self._token = await self._call(create_token, self.api_key, base_url=self.base_url)
            self._session = await self._call(new_session, self._token, base_url=self.base_url)
            await self._call(start_session, self._token, self.session_id, base_url=self.base_url)
        except HeyGenError as e:
            logger.warning("HeyGen session could not be opened: %s", e)
            self._session = None
            return False
        logger.info("HeyGen session %s started", self.session_id)
        return True

    async def _task(self, text: str, task_type: str) -> bool:
        if not self.session_id:
            logger.warning("HeyGen %s task with no open session", task_type)
            return False
        try:
            await self._call(send_task, self._token, self.session_id, text, task_type, base_url=self.base_url)
            return True
        except HeyGenError as e:
            logger.warning("HeyGen %s task failed: %s", task_type, e)
            return False

    async def speak(self, text: str) -> bool:
        return await self._task(text, TASK_REPEAT)

    async def respond(self, text: str) -> bool:
        return await self._task(text, TASK_TALK)

    async def stop(self) -> None:
        if not self.session_id:
            return
        try:
            await self._call(interrupt, self._token, self.session_id, base_url=self.base_url)
        except HeyGenError as e:
            logger.warning("HeyGen interrupt failed: %s", e)

    async def close(self) -> None:
        if not self.session_id:
            return
        try:
            await self._call(stop_session, self._token, self.session_id, base_url=self.base_url)
        except HeyGenError as e:
            logger.warning("HeyGen stop failed: %s", e)
        finally:
            self._session = None
