"""
Follow-up question suggestions for a finished (user, assistant) turn pair.
"""
import asyncio
import logging
from typing import Callable, Optional, TypedDict

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from core.domain import SuggestionClient
from models import Turn

logger = logging.getLogger(__name__)

SUGGEST_PROMPT = """You are a search engine query generator. You MUST create EXACTLY 3 questions
for the search engine based on the message history.

- Questions must be open-ended and encourage further discussion.
- Questions must be concise (5-10 words) yet informative.
- Questions must relate to the original topic and must not repeat it.
- Write the questions in the language of the conversation.
"""


class SuggestedQuestions(TypedDict):
    """Follow-up questions for the conversation."""
    questions: list[str]


def make_suggester(model: str) -> SuggestionClient:
    llm = ChatOpenAI(model=model, temperature=0).with_structured_output(SuggestedQuestions)

    async def suggest_questions(history: list[dict[str, str]]) -> dict:
        msgs = [SystemMessage(SUGGEST_PROMPT)]
        msgs += [HumanMessage(f"{m['role']}: {m['content']}") for m in history]
        result = await llm.ainvoke(msgs)
        return {'questions': list((result or {}).get('questions') or [])}

    return suggest_questions


class SuggestionFetcher:
    """
    Requests suggestions for one turn pair at a time.

    Each request is keyed by the assistant turn index. Asking for a new index
    cancels the live fetch, and a result for any index other than the live
    one is dropped.
    """

    def __init__(self, suggest: SuggestionClient, on_result: Callable[[list[str]], None]):
        self._suggest = suggest
        self._on_result = on_result
        self.live_index: Optional[int] = None
        self.task: Optional[asyncio.Task] = None

    def request(self, index: int, user: Turn, assistant: Turn) -> bool:
        if index == self.live_index:
            return False
        self.cancel()
        self.live_index = index
        history = [
            {'role': 'user', 'content': user.content},
            {'role': 'assistant', 'content': assistant.content},
        ]
        self.task = asyncio.get_running_loop().create_task(self._fetch(index, history))
        return True

    async def _fetch(self, index: int, history: list[dict[str, str]]) -> None:
        try:
            result = await self._suggest(history)
            questions = [q for q in result.get('questions', []) if isinstance(q, str) and q]
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("Suggestion fetch for turn %d failed: %s", index, exc)
            questions = []

        if index != self.live_index:
            logger.debug("Dropping late suggestions for superseded turn %d", index)
            return
        self._on_result(questions)

    def cancel(self) -> None:
        if self.task is not None and not self.task.done():
            self.task.cancel()
        self.task = None
        self.live_index = None
