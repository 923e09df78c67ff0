import asyncio
import logging
from typing import Any, Dict

from core.domain import StreamingClient
from models import ChatRequest

logger = logging.getLogger(__name__)

TERMINAL_EVENTS = ('done', 'error')


class Orchestrator:
    """
    Runs one ChatRequest against the streaming client and forwards its
    events, tagged with the request id, onto the session's event queue.
    """

    def __init__(self, events_q: asyncio.Queue, client: StreamingClient):
        self.events_q = events_q
        self.client = client

    async def _emit(self, ev: Dict[str, Any]):
        await self.events_q.put(ev)

    async def run(self, request: ChatRequest):
        rid = request.request_id
        logger.debug("Request %d started (model=%s group=%s)",
                     rid, request.params.model_id, request.params.group_id)
        try:
            async for ev in self.client.stream(request):
                await self._emit({**ev, 'request_id': rid})
                if ev.get('type') in TERMINAL_EVENTS:
                    return
        except asyncio.CancelledError:
            logger.debug("Request %d cancelled", rid)
            raise
        except Exception as exc:
            logger.warning("Request %d failed: %s", rid, exc)
            await self._emit({'type': 'error', 'message': str(exc) or type(exc).__name__, 'request_id': rid})
            return

        # stream ended without a terminal event
        await self._emit({'type': 'done', 'reason': 'stop', 'request_id': rid})
