"""Headless tests for the Textual front end wired to fake endpoints."""
from __future__ import annotations

import pytest

from app import ChatApp, parse_args
from core.config import Settings
from models import Turn
from widgets import SuggestionList
from widgets.chat_log import TurnView

from conftest import FakeStream, FakeSuggester, drain


def _app(tmp_path, query: str = "", **kwargs) -> tuple[ChatApp, FakeStream, FakeSuggester]:
    stream, suggester = FakeStream(), FakeSuggester()
    settings = Settings(store_path=tmp_path / "prefs.json", log_dir=tmp_path / "logs", user_id="u-1")
    app = ChatApp(settings, query=query, client=stream, suggest=suggester, **kwargs)
    return app, stream, suggester


@pytest.mark.asyncio
async def test_deep_link_query_streams_into_the_chat_log(tmp_path):
    app, stream, suggester = _app(tmp_path, query="hello")
    async with app.run_test(size=(100, 30)) as pilot:
        await pilot.pause(0.05)
        assert [t.content for t in app.session.transcript] == ["hello"]

        stream.tokens("Hi", " there")
        stream.done()
        await drain(app.session)
        await app.session.fetcher.task
        await pilot.pause(0.05)

        assert len(app.query(TurnView)) == 2
        assert app.session.transcript[-1].content == "Hi there"
        assert app.query_one("#suggestions", SuggestionList).option_count == 3
        assert app.scroller.state == "dormant"
        assert len(suggester.calls) == 1


@pytest.mark.asyncio
async def test_stop_action_ends_the_reply(tmp_path):
    app, stream, suggester = _app(tmp_path, query="long answer please")
    async with app.run_test(size=(100, 30)) as pilot:
        await pilot.pause(0.05)
        stream.tokens("Part one")
        await drain(app.session)
        assert app.session.status == "streaming"
        assert app.scroller.state == "auto_following"

        app.action_stop()
        await pilot.pause(0.05)
        assert app.session.status == "ready"
        assert app.scroller.state == "dormant"
        assert suggester.calls == []


@pytest.mark.asyncio
async def test_edit_shows_the_edited_question_before_any_reply(tmp_path):
    app, stream, _ = _app(tmp_path, query="first")
    async with app.run_test(size=(100, 30)) as pilot:
        await pilot.pause(0.05)
        stream.tokens("a1")
        stream.done()
        await drain(app.session)
        app.session.submit(Turn(role="user", content="second"))
        stream.tokens("a2")
        stream.done()
        await drain(app.session)
        await pilot.pause(0.05)
        assert len(app.query(TurnView)) == 4

        app.session.edit_turn(2, "edited")
        await pilot.pause(0.2)
        assert [v.turn.content for v in app.query(TurnView)] == ["first", "a1", "edited"]

        # stopping before the first token keeps the edited question on screen
        app.action_stop()
        await pilot.pause(0.05)
        assert [v.turn.content for v in app.query(TurnView)] == ["first", "a1", "edited"]


@pytest.mark.asyncio
async def test_cli_model_and_group_are_bound_to_requests(tmp_path):
    app, stream, _ = _app(tmp_path, query="q", model="scira-4o", group="reddit")
    async with app.run_test(size=(100, 30)) as pilot:
        await pilot.pause(0.05)
        params = stream.requests[0].params
        assert (params.model_id, params.group_id, params.user_id) == ("scira-4o", "reddit", "u-1")


def test_parse_args():
    args = parse_args(["-q", "hi", "--model", "scira-4o", "--group", "academic"])
    assert (args.query, args.model, args.group, args.url) == ("hi", "scira-4o", "academic", None)
