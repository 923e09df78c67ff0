"""
Modal pickers for per-session parameters (model, search group).
"""

from textual import on
from textual.widgets import Static, OptionList
from textual.widgets.option_list import Option
from textual.containers import Center, Vertical
from textual.screen import ModalScreen


class OptionPickerScreen(ModalScreen[str | None]):
    """Choose one of ``options``; dismisses with its id, or None on escape."""
    CSS = """
#panel {
    width: 80%;
    max-width: 100;
    border: round $secondary;
    padding: 1 2;
}
#picker_options {
    margin-top: 1;
}
#panel OptionList {
    border: none;
    background: transparent;
}
    """
    BINDINGS = [
        ('escape', 'cancel', 'cancel'),
    ]

    def __init__(self, title: str, options: dict[str, str], current: str | None = None) -> None:
        """
        Args:
            title (str): Heading shown above the list
            options (dict[str, str]): option id -> description
            current (str | None): id to highlight initially
        """
        super().__init__()
        self.title_text = title
        self.options = options
        self.current = current

    def compose(self):
        yield Center(
            Vertical(
                Static(f"[bold]{self.title_text}[/bold]\n", markup=True, classes="title"),
                OptionList(
                    *(Option(f"{key}: {desc}" if desc else key, id=key) for key, desc in self.options.items()),
                    id="picker_options",
                ),
            ),
            id="panel",
        )

    def on_mount(self) -> None:
        ol = self.query_one(OptionList)
        ol.focus()
        keys = list(self.options)
        ol.highlighted = keys.index(self.current) if self.current in keys else 0

    @on(OptionList.OptionSelected)
    def on_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.dismiss(event.option_id)

    def action_cancel(self) -> None:
        self.dismiss(None)
