"""
Prompt input for the assistant session.
"""
from typing import Optional

from textual.widgets import Input
from textual.message import Message

PLACEHOLDER = "What do you want to explore?"


class InputArea(Input):
    """
    Posts Submit on enter. While ``editing_index`` is set the text replaces
    that earlier question instead of starting a new one.
    """

    class Submit(Message, bubble=True):
        def __init__(self, value: str, editing_index: Optional[int] = None) -> None:
            super().__init__()
            self.value = value
            self.editing_index = editing_index

    editing_index: Optional[int] = None

    def begin_edit(self, index: int, text: str) -> None:
        self.editing_index = index
        self.placeholder = "Edit your question"
        self.value = text
        self.cursor_position = len(text)
        self.focus()

    def end_edit(self) -> None:
        self.editing_index = None
        self.placeholder = PLACEHOLDER

    async def on_key(self, event) -> None:
        if event.key == "enter":
            event.stop()
            self.post_message(self.Submit(self.value, self.editing_index))
            self.value = ""
            self.end_edit()
        elif event.key == "escape" and self.editing_index is not None:
            event.stop()
            self.value = ""
            self.end_edit()
