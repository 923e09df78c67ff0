from textual.message import Message
from textual.widgets import Static

from models import SessionParameters

STATUS_LABELS = {
    'idle': 'ready',
    'submitted': 'thinking…',
    'streaming': 'answering…',
    'ready': 'ready',
    'errored': 'error',
}


class StatusBar(Static):
    def show(self, params: SessionParameters, status: str, jump_hint: bool, editing: bool = False) -> None:
        parts = [params.model_id, params.group_id, STATUS_LABELS.get(status, status)]
        if editing:
            parts.append('editing')
        if jump_hint:
            parts.append('↓ F4 newest')
        self.update(' · '.join(parts))


class ClockWidget(Static):
    """Time and date; clicking asks the assistant for them."""

    class Pressed(Message):
        pass

    def show(self, time_label: str, date_label: str) -> None:
        self.update(f"{time_label}  {date_label}")

    def on_click(self) -> None:
        self.post_message(self.Pressed())
