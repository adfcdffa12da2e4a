"""Search Modal Screen - Unified search over aircraft, airports and users"""

from typing import List, Optional, TYPE_CHECKING

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Input, OptionList, Static
from textual.widgets.option_list import Option

from backend.core.models import SearchCategory, SearchIndexEntry

if TYPE_CHECKING:
    from ui.app import LiveMapApp


CATEGORY_SYMBOLS = {
    SearchCategory.AIRCRAFT: "#",
    SearchCategory.AIRPORT: "@",
    SearchCategory.USER: "~",
}


class SearchScreen(ModalScreen):
    """Search modal; dismisses with the chosen SearchIndexEntry (or None)"""

    @property
    def live_app(self) -> "LiveMapApp":
        """Return the app with proper type hint"""
        return self.app  # type: ignore[return-value]

    CSS = """
    SearchScreen {
        align: center middle;
    }

    #search-container {
        width: 80;
        height: auto;
        max-height: 70%;
        background: $surface;
        border: thick $primary;
        padding: 1 2;
        overflow: hidden;
    }

    #search-title {
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
    }

    #search-input {
        margin-bottom: 1;
    }

    #search-list {
        height: 1fr;
        max-height: 100%;
        overflow-y: auto;
    }

    #search-hint {
        text-align: center;
        color: $text-muted;
        margin-top: 1;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Close", priority=True),
    ]

    def __init__(self, initial_query: str = ""):
        super().__init__()
        self.initial_query = initial_query
        self.results: List[SearchIndexEntry] = []

    def compose(self) -> ComposeResult:
        with Container(id="search-container"):
            yield Static("Search", id="search-title")
            yield Input(value=self.initial_query, placeholder="Search... (@airport, #aircraft, ~user)", id="search-input")
            yield OptionList(Option("Searching...", disabled=True), id="search-list")
            yield Static("@ Airport | # Aircraft | ~ User | Enter Select | Esc Close", id="search-hint")

    def on_mount(self) -> None:
        """Focus input and run the initial query"""
        self.query_one("#search-input", Input).focus()
        self.live_app.live_state.set_query(self.initial_query)

    def _format_label(self, entry: SearchIndexEntry) -> str:
        symbol = CATEGORY_SYMBOLS.get(entry.type, "")
        return f"{symbol} {entry.title} - {entry.subtitle}"

    def show_results(self, results: List[SearchIndexEntry]) -> None:
        """Replace the option list with the latest results"""
        self.results = list(results)
        option_list = self.query_one("#search-list", OptionList)
        option_list.clear_options()

        if not self.results:
            option_list.add_option(Option("No results found", disabled=True))
            return

        for index, entry in enumerate(self.results):
            option_list.add_option(Option(self._format_label(entry), id=str(index)))

        if option_list.option_count > 0:
            option_list.highlighted = 0

    def on_input_changed(self, event: Input.Changed) -> None:
        """Every keystroke goes to the debounced search index"""
        self.live_app.live_state.set_query(event.value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._choose_highlighted()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self._choose_highlighted()

    def _choose_highlighted(self) -> None:
        option_list = self.query_one("#search-list", OptionList)
        entry: Optional[SearchIndexEntry] = None
        if option_list.highlighted is not None and option_list.highlighted < len(self.results):
            entry = self.results[option_list.highlighted]
        if entry is not None:
            self.dismiss(entry)

    def action_close(self) -> None:
        """Close the modal"""
        self.dismiss(None)
