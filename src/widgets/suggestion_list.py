from textual import on
from textual.widgets import OptionList
from textual.widgets.option_list import Option
from textual.message import Message


class SuggestionList(OptionList):
    """Follow-up questions for the last answer; hidden while empty."""

    class Chosen(Message):
        def __init__(self, question: str) -> None:
            super().__init__()
            self.question = question

    def set_questions(self, questions: list[str]) -> None:
        self.clear_options()
        self.add_options(Option(q) for q in questions)
        self.display = bool(questions)
        if questions:
            self.highlighted = 0

    @on(OptionList.OptionSelected)
    def on_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.post_message(self.Chosen(str(event.option.prompt)))
        event.stop()
