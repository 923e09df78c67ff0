"""Tests for deep-link bootstrapping."""
from __future__ import annotations

import pytest

from core.bootstrap import initial_query
from models import Turn

from conftest import drain


@pytest.mark.asyncio
async def test_fires_once_per_session(session, stream):
    assert session.bootstrapper.check("latest rust release") is True
    assert [t.content for t in session.transcript] == ["latest rust release"]

    stream.tokens("1.80")
    stream.done()
    await drain(session)

    # a remounted view checks again with the same query
    assert session.bootstrapper.check("latest rust release") is False
    assert len(stream.requests) == 1


@pytest.mark.asyncio
async def test_waits_for_a_late_query(session):
    assert session.bootstrapper.check("") is False
    assert session.bootstrapper.check(None) is False
    assert not session.bootstrapper.latched

    assert session.bootstrapper.check("  weather in Oslo ") is True
    assert session.transcript[0].content == "weather in Oslo"


@pytest.mark.asyncio
async def test_defers_when_another_submit_won_the_race(session, stream):
    session.submit(Turn(role="user", content="typed by hand"))

    assert session.bootstrapper.check("from the link") is False
    assert session.bootstrapper.latched
    assert len(session.transcript) == 1

    stream.done()
    await drain(session)
    session.reset()
    assert session.bootstrapper.check("from the link") is False
    assert session.transcript == []


def test_initial_query_prefers_query_over_q():
    assert initial_query(query="a", q="b") == "a"
    assert initial_query(q="b") == "b"
    assert initial_query() == ""


def test_initial_query_from_deep_link_url():
    assert initial_query(url="https://example.com/?q=hello%20world") == "hello world"
    assert initial_query(url="https://example.com/?q=low&query=high") == "high"
    assert initial_query(query="explicit", url="https://example.com/?query=link") == "explicit"
    assert initial_query(url="https://example.com/") == ""
