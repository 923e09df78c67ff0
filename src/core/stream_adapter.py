
from typing import Any, AsyncIterator, Dict, Mapping, Optional
from core.domain import DomainEvent

_FINISH_REASONS = {
    'stop': 'stop',
    'length': 'length',
    'tool_calls': 'stop',
    'function_call': 'stop',
}


def _extract_text(data: Mapping[str, Any]) -> Optional[str]:
    ch = data.get('chunk')
    if isinstance(ch, str):
        return ch or None

    text = getattr(ch, 'content', None)
    return text if isinstance(text, str) and text else None


def _extract_finish(data: Mapping[str, Any]) -> Optional[str]:
    out = data.get('output')
    meta = getattr(out, 'response_metadata', None)
    if not isinstance(meta, dict):
        return None
    raw = meta.get('finish_reason')
    if not raw:
        return None
    return _FINISH_REASONS.get(raw, 'stop')


async def adapt_events(stream: AsyncIterator[Dict[str, Any]]) -> AsyncIterator[DomainEvent]:
    """
    langchain의 astream_events를 session pump가 소비할 DomainEvent로 변환.
    Always ends with exactly one 'done' event.
    """
    reason = 'stop'
    async for ev in stream:
        event = ev.get('event')
        data = ev.get('data') or {}

        if event == 'on_chat_model_stream':
            text = _extract_text(data)
            if text:
                yield {'type': 'token', 'text': text}

        elif event == 'on_chat_model_end':
            reason = _extract_finish(data) or reason

    yield {'type': 'done', 'reason': reason}
