"""
Conversation state for one assistant session.

ChatSession is the single owner of the transcript, the stream status, the
per-session parameters and the suggestion list. Requests run as tasks that
push events onto ``event_q``; the pump applies them in arrival order.
"""
import asyncio
import logging
from dataclasses import replace
from typing import Callable, Optional

from core.bootstrap import DeepLinkBootstrapper
from core.config import MODELS, SEARCH_GROUPS
from core.domain import DomainEvent, StreamingClient, SuggestionClient
from core.orchestrator import Orchestrator
from core.preferences import PreferenceStore
from core.suggestions import SuggestionFetcher
from models import (
    BUSY_STATUSES, ChatRequest, FinishReason, SessionParameters, StreamStatus, Turn,
    last_user_index, previous_pair,
)

logger = logging.getLogger(__name__)

DATE_TIME_QUESTION = "What's the current date and time?"

Listener = Callable[[str], None]
Notifier = Callable[[str, str], None]


class ChatSession:
    def __init__(
        self,
        client: StreamingClient,
        suggest: SuggestionClient,
        store: PreferenceStore,
        params: SessionParameters,
        on_notify: Optional[Notifier] = None,
    ):
        self.event_q: asyncio.Queue = asyncio.Queue()
        self.orchestrator = Orchestrator(self.event_q, client)
        self.store = store
        self.params = params
        self.on_notify = on_notify

        self.transcript: list[Turn] = []
        self.status: StreamStatus = 'idle'
        self.suggestions: list[str] = []

        self.fetcher = SuggestionFetcher(suggest, self._set_suggestions)
        self.bootstrapper = DeepLinkBootstrapper(self)

        self._next_request_id = 1
        self.active_request: Optional[ChatRequest] = None
        self.request_task: Optional[asyncio.Task] = None
        self._pump_task: Optional[asyncio.Task] = None
        self._listeners: list[Listener] = []

    @property
    def busy(self) -> bool:
        return self.status in BUSY_STATUSES

    @property
    def last_user_index(self) -> int:
        return last_user_index(self.transcript)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register ``listener`` for change kinds: transcript, suggestions,
        status, parameters. Returns a function that unsubscribes it.
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _changed(self, kind: str) -> None:
        for listener in list(self._listeners):
            listener(kind)

    def _set_status(self, status: StreamStatus) -> None:
        if status == self.status:
            return
        logger.debug("status %s -> %s", self.status, status)
        self.status = status
        self._changed('status')

    def _set_suggestions(self, questions: list[str]) -> None:
        self.suggestions = list(questions)
        self._changed('suggestions')

    def _clear_suggestions(self) -> None:
        self.fetcher.cancel()
        if self.suggestions:
            self._set_suggestions([])

    def _notify(self, message: str, severity: str = 'error') -> None:
        if self.on_notify is not None:
            self.on_notify(message, severity)

    # -- lifecycle

    def start(self) -> None:
        if self._pump_task is None:
            self._pump_task = asyncio.get_running_loop().create_task(self._pump())

    async def close(self) -> None:
        self.stop()
        pending = [
            t for t in (self.request_task, self.fetcher.task, self._pump_task)
            if t is not None and not t.done()
        ]
        self.fetcher.cancel()
        for t in pending:
            t.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        self._pump_task = None

    # -- user actions

    def submit(self, turn: Turn) -> bool:
        """
        Append a user turn and start streaming the reply.

        Returns False, changing nothing, while a request is in flight.
        """
        if turn.role != 'user':
            raise ValueError("only user turns can be submitted")
        if self.busy:
            logger.info("submit rejected: session is busy (%s)", self.status)
            return False

        self._clear_suggestions()
        self.transcript.append(turn)

        request = ChatRequest(
            request_id=self._next_request_id,
            params=self.params,
            transcript=tuple(replace(t) for t in self.transcript),
        )
        self._next_request_id += 1
        self.active_request = request

        self._set_status('submitted')
        self._changed('transcript')
        self.request_task = asyncio.get_running_loop().create_task(self.orchestrator.run(request))
        return True

    def stop(self) -> bool:
        """Cancel the in-flight request. Content received so far is kept."""
        if not self.busy:
            return False
        task = self.request_task
        self.finalize('aborted')
        if task is not None and not task.done():
            task.cancel()
        return True

    def edit_turn(self, index: int, new_content: str) -> bool:
        """
        Replace the user turn at ``index`` and everything after it with a
        fresh submission of ``new_content``.
        """
        if not 0 <= index < len(self.transcript):
            raise ValueError(f"no turn at index {index}")
        edited = self.transcript[index]
        if edited.role != 'user':
            raise ValueError("only user turns can be edited")

        self.stop()
        del self.transcript[index:]
        self._clear_suggestions()
        self._changed('transcript')
        return self.submit(Turn(role='user', content=new_content, attachments=edited.attachments))

    def ask_date_time(self) -> bool:
        return self.submit(Turn(role='user', content=DATE_TIME_QUESTION))

    def reset(self) -> None:
        """Start a new, empty conversation. The deep link is not replayed."""
        self.stop()
        self._clear_suggestions()
        self.transcript.clear()
        self._set_status('idle')
        self._changed('transcript')

    # -- parameters

    def set_model(self, model_id: str) -> None:
        if model_id not in MODELS:
            raise ValueError(f"unknown model: {model_id}")
        self.params = replace(self.params, model_id=model_id)
        self.store.remember_model(model_id)
        self._changed('parameters')

    def set_group(self, group_id: str) -> None:
        if group_id not in SEARCH_GROUPS:
            raise ValueError(f"unknown search group: {group_id}")
        self.params = replace(self.params, group_id=group_id)
        self._changed('parameters')

    # -- stream events

    def append_delta(self, token: str) -> None:
        if not self.busy:
            logger.debug("delta ignored outside a streaming episode")
            return
        if self.status == 'submitted':
            self.transcript.append(Turn(role='assistant'))
            self._set_status('streaming')
        self.transcript[-1].content += token
        self._changed('transcript')

    def finalize(self, reason: FinishReason) -> None:
        if not self.busy:
            logger.debug("finalize(%s) ignored outside a streaming episode", reason)
            return
        self.active_request = None
        self._set_status('errored' if reason == 'error' else 'ready')

        if reason not in ('stop', 'length'):
            return
        index = len(self.transcript) - 1
        pair = previous_pair(self.transcript, index)
        if pair is not None and pair[1].content:
            self.fetcher.request(index, *pair)

    def handle_event(self, ev: DomainEvent) -> None:
        active = self.active_request
        if active is None or ev.get('request_id') != active.request_id:
            logger.debug("Dropping %s event from stale request %s", ev.get('type'), ev.get('request_id'))
            return

        etype = ev.get('type', '')
        if etype == 'token':
            text = ev.get('text', '')
            if text:
                self.append_delta(text)
        elif etype == 'done':
            self.finalize(ev.get('reason', 'stop'))
        elif etype == 'error':
            message = ev.get('message', '')
            self.finalize('error')
            self._notify(f"An error occurred while processing your request. {message}".strip())

    async def _pump(self):
        while True:
            ev = await self.event_q.get()
            try:
                self.handle_event(ev)
            except Exception:
                logger.exception("Failed to handle %s event", ev.get('type'))
            finally:
                self.event_q.task_done()
