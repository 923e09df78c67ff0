"""
Data models for the assistant session.
"""
from .turn import (
    Attachment, BUSY_STATUSES, FinishReason, Role, StreamStatus, Turn,
    last_user_index, previous_pair,
)
from .session import ChatRequest, SessionParameters

__all__ = [
    "Attachment", "BUSY_STATUSES", "ChatRequest", "FinishReason", "Role",
    "SessionParameters", "StreamStatus", "Turn", "last_user_index", "previous_pair",
]
