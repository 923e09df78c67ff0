"""
Per-session parameters and the request snapshot bound from them.
"""
from dataclasses import dataclass, field

from models.turn import Turn


@dataclass(frozen=True)
class SessionParameters:
    model_id: str
    group_id: str = 'web'
    user_id: str = ''
    timezone: str = 'UTC'


@dataclass(frozen=True)
class ChatRequest:
    """
    What goes out to the streaming endpoint for one submission.

    Built once at submit time; the transcript is a tuple copy so later
    edits of the session never leak into an in-flight request.
    """
    request_id: int
    params: SessionParameters
    transcript: tuple[Turn, ...] = field(default_factory=tuple)

    def to_payload(self) -> dict:
        return {
            'model': self.params.model_id,
            'group': self.params.group_id,
            'user_id': self.params.user_id,
            'timezone': self.params.timezone,
            'messages': [t.to_message() for t in self.transcript],
        }
