"""
Events produced by the streaming chat endpoint, consumed by the session pump.
"""

from typing import TYPE_CHECKING, Any, AsyncIterator, Literal, Protocol, TypedDict, Union

if TYPE_CHECKING:
    from models import ChatRequest


class TokenEvent(TypedDict, total=False):
    type: Literal['token']
    text: str
    request_id: int


class DoneEvent(TypedDict, total=False):
    type: Literal['done']
    reason: str
    request_id: int


class ErrorEvent(TypedDict, total=False):
    type: Literal['error']
    message: str
    request_id: int


DomainEvent = Union[TokenEvent, DoneEvent, ErrorEvent]


class StreamingClient(Protocol):
    """
    Anything that turns a ChatRequest into ordered domain events.
    """
    def stream(self, request: "ChatRequest") -> AsyncIterator[DomainEvent]: ...


class SuggestionClient(Protocol):
    async def __call__(self, history: list[dict[str, str]]) -> dict[str, Any]: ...
