"""Tests for turning langgraph stream events into domain events."""
from __future__ import annotations

import asyncio

import pytest
from langchain_core.messages import AIMessage, AIMessageChunk

from core.orchestrator import Orchestrator
from core.stream_adapter import adapt_events
from models import ChatRequest, SessionParameters, Turn


async def _events(*items):
    for item in items:
        yield item


async def _collect(stream) -> list[dict]:
    return [ev async for ev in stream]


def _chunk(text: str) -> dict:
    return {'event': 'on_chat_model_stream', 'data': {'chunk': AIMessageChunk(content=text)}}


def _end(finish_reason: str | None) -> dict:
    meta = {'finish_reason': finish_reason} if finish_reason else {}
    return {'event': 'on_chat_model_end', 'data': {'output': AIMessage(content='', response_metadata=meta)}}


@pytest.mark.asyncio
async def test_tokens_then_done_with_finish_reason():
    events = await _collect(adapt_events(_events(
        {'event': 'on_chain_start', 'data': {}},
        _chunk('It is'),
        _chunk(''),
        _chunk(' 10:00 AM.'),
        _end('length'),
        {'event': 'on_chain_end', 'data': {}},
    )))
    assert events == [
        {'type': 'token', 'text': 'It is'},
        {'type': 'token', 'text': ' 10:00 AM.'},
        {'type': 'done', 'reason': 'length'},
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("raw, expected", [
    ('stop', 'stop'),
    ('tool_calls', 'stop'),
    ('content_filter', 'stop'),
    (None, 'stop'),
])
async def test_finish_reason_mapping(raw, expected):
    events = await _collect(adapt_events(_events(_chunk('x'), _end(raw))))
    assert events[-1] == {'type': 'done', 'reason': expected}


@pytest.mark.asyncio
async def test_plain_string_chunks_are_accepted():
    events = await _collect(adapt_events(_events(
        {'event': 'on_chat_model_stream', 'data': {'chunk': 'raw'}},
    )))
    assert events[0] == {'type': 'token', 'text': 'raw'}


class _ScriptedClient:
    def __init__(self, *items, fail: Exception | None = None):
        self.items = items
        self.fail = fail

    async def stream(self, request):
        for item in self.items:
            yield item
        if self.fail is not None:
            raise self.fail


def _request(rid: int = 7) -> ChatRequest:
    return ChatRequest(
        request_id=rid,
        params=SessionParameters(model_id='scira-default'),
        transcript=(Turn(role='user', content='hi'),),
    )


def _drain_queue(q: asyncio.Queue) -> list[dict]:
    out = []
    while not q.empty():
        out.append(q.get_nowait())
    return out


@pytest.mark.asyncio
async def test_orchestrator_tags_events_with_request_id():
    q: asyncio.Queue = asyncio.Queue()
    client = _ScriptedClient({'type': 'token', 'text': 'a'}, {'type': 'done', 'reason': 'stop'})
    await Orchestrator(q, client).run(_request())
    assert _drain_queue(q) == [
        {'type': 'token', 'text': 'a', 'request_id': 7},
        {'type': 'done', 'reason': 'stop', 'request_id': 7},
    ]


@pytest.mark.asyncio
async def test_orchestrator_turns_failures_into_error_events():
    q: asyncio.Queue = asyncio.Queue()
    client = _ScriptedClient({'type': 'token', 'text': 'par'}, fail=ConnectionError("dropped"))
    await Orchestrator(q, client).run(_request())
    assert _drain_queue(q) == [
        {'type': 'token', 'text': 'par', 'request_id': 7},
        {'type': 'error', 'message': 'dropped', 'request_id': 7},
    ]


@pytest.mark.asyncio
async def test_orchestrator_closes_an_unterminated_stream():
    q: asyncio.Queue = asyncio.Queue()
    await Orchestrator(q, _ScriptedClient({'type': 'token', 'text': 'a'})).run(_request())
    assert _drain_queue(q)[-1] == {'type': 'done', 'reason': 'stop', 'request_id': 7}
