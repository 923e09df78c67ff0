"""
Streaming assistant - terminal client
"""

import argparse
import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional
from textual import work
from textual.app import App, ComposeResult

from core.autoscroll import AutoScrollController
from core.bootstrap import initial_query
from core.chat_graph import GraphStreamClient
from core.clock import WidgetClock
from core.config import DEFAULT_GROUP, MODELS, SEARCH_GROUPS, Settings
from core.domain import StreamingClient, SuggestionClient
from core.preferences import PreferenceStore
from core.session import ChatSession
from core.suggestions import make_suggester
from models import SessionParameters, Turn
from screens import OptionPickerScreen
from widgets.input_area import PLACEHOLDER
from widgets import ChatLog, ClockWidget, InputArea, StatusBar, SuggestionList

logger = logging.getLogger(__name__)


class ChatApp(App):
    CSS = """
#status_bar { height: 1; color: $text-muted; }
#clock { height: 1; content-align: center middle; }
#chat_log { height: 1fr; }
#chat_log .user { color: $text-muted; margin-top: 1; }
#suggestions { height: auto; max-height: 5; }
    """
    BINDINGS = [
        ('escape', 'stop', 'Stop'),
        ('ctrl+e', 'edit_last', 'Edit last'),
        ('ctrl+n', 'new_chat', 'New'),
        ('f2', 'pick_model', 'Model'),
        ('f3', 'pick_group', 'Group'),
        ('f4', 'jump_to_bottom', 'Newest'),
    ]

    def __init__(
        self,
        settings: Settings,
        query: str = "",
        model: Optional[str] = None,
        group: Optional[str] = None,
        client: Optional[StreamingClient] = None,
        suggest: Optional[SuggestionClient] = None,
    ):
        """Initialize the chat application with default state."""
        super().__init__()
        self.settings = settings
        self.store = PreferenceStore(settings.store_path)
        params = SessionParameters(
            model_id=model or self.store.selected_model(),
            group_id=group or DEFAULT_GROUP,
            user_id=settings.user_id or self.store.user_id(),
            timezone=settings.timezone,
        )
        self.session = ChatSession(
            client or GraphStreamClient(),
            suggest or make_suggester(settings.suggestion_model),
            self.store,
            params,
            on_notify=self._on_notify,
        )
        self.initial_query = query

        self.scroller: Optional[AutoScrollController] = None
        self.widget_clock: Optional[WidgetClock] = None
        self._unsubscribe = None

    def compose(self) -> ComposeResult:
        """
        Create the main UI layout.
        """
        yield StatusBar(id="status_bar")
        yield ClockWidget(id="clock")
        yield ChatLog(id="chat_log")
        yield SuggestionList(id="suggestions")
        yield InputArea(id="input_text", placeholder=PLACEHOLDER)

    async def on_mount(self) -> None:
        """Wire the session to the widgets once the UI is mounted."""
        chat_log = self.query_one("#chat_log", ChatLog)
        self.query_one("#suggestions", SuggestionList).display = False

        self.scroller = AutoScrollController(
            chat_log,
            debounce=self.settings.scroll_debounce,
            threshold=self.settings.scroll_threshold,
            settle=0.25,
        )
        self.widget_clock = WidgetClock(
            self._on_tick, timezone=self.session.params.timezone, locale=self.settings.locale,
        )
        self.widget_clock.mount()

        self._unsubscribe = self.session.subscribe(self._on_session_change)
        self.session.start()
        self._refresh_status()
        self.query_one("#input_text", InputArea).focus()

        # the deep link is checked after the first render, never during construction
        self.call_after_refresh(self._bootstrap)

    def _bootstrap(self) -> None:
        self.session.bootstrapper.check(self.initial_query)

    async def on_unmount(self) -> None:
        if self.scroller:
            self.scroller.teardown()
        if self.widget_clock:
            self.widget_clock.unmount()
        if self._unsubscribe:
            self._unsubscribe()
        await self.session.close()

    # -- session -> widgets

    def _on_session_change(self, kind: str) -> None:
        session = self.session
        if kind == 'status':
            self.scroller.on_status(session.status)
        elif kind == 'transcript':
            self.query_one("#chat_log", ChatLog).sync(session.transcript)
            self.query_one("#clock", ClockWidget).display = not session.transcript
        elif kind == 'suggestions':
            self.query_one("#suggestions", SuggestionList).set_questions(session.suggestions)

        if kind in ('transcript', 'suggestions'):
            self.scroller.on_content_changed()
        self._refresh_status()

    def _refresh_status(self) -> None:
        self.query_one("#status_bar", StatusBar).show(
            self.session.params,
            self.session.status,
            jump_hint=bool(self.scroller and self.scroller.show_jump_to_bottom),
            editing=self.query_one("#input_text", InputArea).editing_index is not None,
        )

    def _on_tick(self, now) -> None:
        self.query_one("#clock", ClockWidget).show(self.widget_clock.time_label(), self.widget_clock.date_label())

    def _on_notify(self, message: str, severity: str) -> None:
        self.notify(message, title="Error", severity=severity)

    # -- widgets -> session

    async def on_input_area_submit(self, message: InputArea.Submit) -> None:
        text = message.value.strip()
        if not text:
            return

        if message.editing_index is not None:
            try:
                self.session.edit_turn(message.editing_index, text)
            except ValueError as exc:
                self.notify(str(exc), severity="warning")
            return

        if not self.session.submit(Turn(role='user', content=text)):
            self.notify("Still answering. Press Esc to stop first.", severity="warning")

    async def on_suggestion_list_chosen(self, message: SuggestionList.Chosen) -> None:
        self.session.submit(Turn(role="user", content=message.question))

    async def on_clock_widget_pressed(self, message: ClockWidget.Pressed) -> None:
        self.session.ask_date_time()

    async def on_chat_log_scrolled(self, message: ChatLog.Scrolled) -> None:
        if self.scroller:
            self.scroller.on_scroll()
            self._refresh_status()

    # -- actions

    def action_stop(self) -> None:
        self.session.stop()

    def action_edit_last(self) -> None:
        index = self.session.last_user_index
        if index < 0:
            return
        self.query_one("#input_text", InputArea).begin_edit(index, self.session.transcript[index].content)
        self._refresh_status()

    def action_new_chat(self) -> None:
        self.query_one("#input_text", InputArea).end_edit()
        self.session.reset()

    def action_jump_to_bottom(self) -> None:
        self.scroller.jump_to_bottom()

    def action_pick_model(self) -> None:
        self._pick_model()

    def action_pick_group(self) -> None:
        self._pick_group()

    @work(exclusive=True, group="picker")
    async def _pick_model(self) -> None:
        choice = await self.push_screen_wait(
            OptionPickerScreen("Model", MODELS, self.session.params.model_id)
        )
        if choice:
            self.session.set_model(choice)

    @work(exclusive=True, group="picker")
    async def _pick_group(self) -> None:
        choice = await self.push_screen_wait(
            OptionPickerScreen("Search group", SEARCH_GROUPS, self.session.params.group_id)
        )
        if choice:
            self.session.set_group(choice)


def setup_logging(settings: Settings) -> None:
    settings.log_dir.mkdir(parents=True, exist_ok=True)
    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.log_level, logging.INFO))
    root.handlers.clear()
    handler = RotatingFileHandler(
        settings.log_dir / "assistant.log", maxBytes=2_000_000, backupCount=5, encoding="utf-8"
    )
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    root.addHandler(handler)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Streaming assistant in the terminal")
    parser.add_argument("-q", "--query", help="start the conversation with this question")
    parser.add_argument("--url", help="deep link carrying ?query= or ?q=")
    parser.add_argument("--model", choices=sorted(MODELS), help="model for this session")
    parser.add_argument("--group", choices=sorted(SEARCH_GROUPS), help="search group for this session")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    settings = Settings.from_env()
    setup_logging(settings)
    logger.info("Starting assistant model=%s group=%s", args.model, args.group)

    app = ChatApp(
        settings,
        query=initial_query(query=args.query, url=args.url),
        model=args.model,
        group=args.group,
    )
    if args.model:
        app.store.remember_model(args.model)
    app.run()


if __name__ == "__main__":
    main(sys.argv[1:])
