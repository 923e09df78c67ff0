"""
Scrollable transcript view.
"""
from rich.text import Text
from textual.containers import VerticalScroll
from textual.message import Message
from textual.widgets import Static

from models import Turn

ROLE_LABELS = {'user': 'you', 'assistant': 'assistant'}


def render_turn(turn: Turn) -> Text:
    text = Text.assemble((f"{ROLE_LABELS.get(turn.role, turn.role)}: ", "bold dim"), turn.content)
    for a in turn.attachments:
        text.append(f"\n  [{a.name} · {a.content_type} · {a.size} bytes]", style="dim")
    return text


class TurnView(Static):
    def __init__(self, turn: Turn) -> None:
        super().__init__(render_turn(turn), classes=turn.role)
        self.turn = turn

    def show(self, turn: Turn) -> None:
        self.turn = turn
        self.update(render_turn(turn))


class ChatLog(VerticalScroll):
    """
    One TurnView per transcript entry. Also the viewport the auto-scroll
    controller drives.
    """

    class Scrolled(Message):
        pass

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        # views still pending removal stay in the DOM until the next refresh
        self._views: list[TurnView] = []

    def sync(self, transcript: list[Turn]) -> None:
        while len(self._views) > len(transcript):
            self._views.pop().remove()
        for view, turn in zip(self._views, transcript):
            view.show(turn)
        for turn in transcript[len(self._views):]:
            view = TurnView(turn)
            self._views.append(view)
            self.mount(view)

    def distance_from_bottom(self) -> float:
        return max(0.0, self.max_scroll_y - self.scroll_y)

    def scroll_to_bottom(self, animate: bool = True) -> None:
        # wait for pending mounts/updates to be laid out
        self.call_after_refresh(self.scroll_end, animate=animate, duration=0.08 if animate else None)

    def watch_scroll_y(self, old_value: float, new_value: float) -> None:
        super().watch_scroll_y(old_value, new_value)
        self.post_message(self.Scrolled())
