"""Shared fakes for the session tests."""
from __future__ import annotations

import asyncio

import pytest
import pytest_asyncio

from core.preferences import PreferenceStore
from core.session import ChatSession
from models import SessionParameters


class FakeStream:
    """Streaming client whose events are fed by the test, per request."""

    def __init__(self) -> None:
        self.requests = []
        self._queues: dict[int, asyncio.Queue] = {}

    def stream(self, request):
        self.requests.append(request)
        q: asyncio.Queue = asyncio.Queue()
        self._queues[request.request_id] = q
        return self._iter(q)

    async def _iter(self, q: asyncio.Queue):
        while True:
            ev = await q.get()
            if isinstance(ev, Exception):
                raise ev
            yield ev

    def feed(self, *events, request_id: int | None = None) -> None:
        rid = request_id if request_id is not None else self.requests[-1].request_id
        for ev in events:
            self._queues[rid].put_nowait(ev)

    def tokens(self, *texts: str, request_id: int | None = None) -> None:
        self.feed(*({"type": "token", "text": t} for t in texts), request_id=request_id)

    def done(self, reason: str = "stop", request_id: int | None = None) -> None:
        self.feed({"type": "done", "reason": reason}, request_id=request_id)


class FakeSuggester:
    """Records each call; optionally blocks on ``gate`` or raises ``error``."""

    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[list[dict]] = []
        self.error = error
        self.gate: asyncio.Event | None = None

    async def __call__(self, history):
        self.calls.append(history)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return {"questions": [f"More about {history[-1]['content']}?", "Why?", "How?"]}


class FakeHandle:
    def __init__(self, when: float, callback) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Manual clock standing in for ``loop.call_later``."""

    def __init__(self) -> None:
        self.now = 0.0
        self.handles: list[FakeHandle] = []

    def __call__(self, delay, callback):
        handle = FakeHandle(self.now + delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> list[FakeHandle]:
        return [h for h in self.handles if not h.cancelled]

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [h for h in self.pending if h.when <= target + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self.handles.remove(handle)
            self.now = max(self.now, handle.when)
            handle.callback()
        self.now = target


async def drain(session: ChatSession, rounds: int = 20) -> None:
    """Let request tasks forward their events and the pump apply them."""
    for _ in range(rounds):
        await asyncio.sleep(0)
    await session.event_q.join()
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def stream() -> FakeStream:
    return FakeStream()


@pytest.fixture
def suggester() -> FakeSuggester:
    return FakeSuggester()


@pytest.fixture
def store(tmp_path) -> PreferenceStore:
    return PreferenceStore(tmp_path / "prefs.json")


@pytest.fixture
def notices() -> list[tuple[str, str]]:
    return []


@pytest_asyncio.fixture
async def session(stream, suggester, store, notices):
    params = SessionParameters(model_id="scira-default", group_id="web", user_id="u-1", timezone="Europe/Berlin")
    s = ChatSession(stream, suggester, store, params, on_notify=lambda msg, sev: notices.append((msg, sev)))
    s.start()
    yield s
    await s.close()
