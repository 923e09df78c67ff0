"""
Data models for the assistant session.
"""
from dataclasses import dataclass
from typing import Literal, Optional

Role = Literal['user', 'assistant']
StreamStatus = Literal['idle', 'submitted', 'streaming', 'ready', 'errored']
FinishReason = Literal['stop', 'length', 'error', 'aborted']

BUSY_STATUSES = ('submitted', 'streaming')


@dataclass(frozen=True)
class Attachment:
    """
    A file attached to a user turn. Only the shape is tracked here.
    """
    name: str
    content_type: str
    url: str
    size: int


@dataclass
class Turn:
    """
    Represents a single message in the conversation, from the user or the assistant.
    """
    role: Role
    content: str = ""
    attachments: tuple[Attachment, ...] = ()

    def to_message(self) -> dict:
        msg = {'role': self.role, 'content': self.content}
        if self.attachments:
            msg['attachments'] = [
                {'name': a.name, 'contentType': a.content_type, 'url': a.url, 'size': a.size}
                for a in self.attachments
            ]
        return msg


def last_user_index(transcript: list[Turn]) -> int:
    for i in range(len(transcript) - 1, -1, -1):
        if transcript[i].role == 'user':
            return i
    return -1


def previous_pair(transcript: list[Turn], assistant_index: int) -> Optional[tuple[Turn, Turn]]:
    """
    Return the (user, assistant) pair ending at ``assistant_index``, or None
    when there is no assistant turn there or no user turn before it.
    """
    if not 0 <= assistant_index < len(transcript):
        return None
    assistant = transcript[assistant_index]
    if assistant.role != 'assistant':
        return None
    user_idx = last_user_index(transcript[:assistant_index])
    if user_idx < 0:
        return None
    return transcript[user_idx], assistant
