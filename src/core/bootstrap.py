"""
Starts a conversation from a deep-linked query.
"""
import logging
from typing import TYPE_CHECKING, Optional
from urllib.parse import parse_qs, urlparse

from models import Turn

if TYPE_CHECKING:
    from core.session import ChatSession

logger = logging.getLogger(__name__)


def initial_query(query: Optional[str] = None, q: Optional[str] = None, url: Optional[str] = None) -> str:
    """
    Resolve the deep-linked query. ``query`` wins over ``q``, and explicit
    values win over the ones carried by ``url``.
    """
    params: dict[str, list[str]] = {}
    if url:
        params = parse_qs(urlparse(url).query)
    query = query or next(iter(params.get('query', [])), '')
    q = q or next(iter(params.get('q', [])), '')
    return (query or q or '').strip()


class DeepLinkBootstrapper:
    """
    One-shot: submits the initial query as the first user turn, at most once
    per session. Owned by the session so a remounted view shares the latch.
    """

    def __init__(self, session: "ChatSession"):
        self.session = session
        self.latched = False

    def check(self, query: Optional[str]) -> bool:
        if self.latched:
            return False
        query = (query or '').strip()
        if not query:
            # the query may still show up after the first render
            return False

        self.latched = True
        if self.session.transcript or self.session.busy:
            logger.info("Deep-link query deferred: session already has turns")
            return False

        logger.info("[initial query]: %s", query)
        return self.session.submit(Turn(role='user', content=query))
