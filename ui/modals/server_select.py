"""Server Selection Modal Screen"""

from typing import List, Optional

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import OptionList, Static
from textual.widgets.option_list import Option

from backend.core.models import ServerContext


class ServerSelectScreen(ModalScreen):
    """Pick the active server; dismisses with the server id (or None)"""

    CSS = """
    ServerSelectScreen {
        align: center middle;
    }

    #server-container {
        width: 60;
        height: auto;
        max-height: 60%;
        background: $surface;
        border: thick $primary;
        padding: 1 2;
    }

    #server-title {
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
    }

    #server-hint {
        text-align: center;
        color: $text-muted;
        margin-top: 1;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Close", priority=True),
    ]

    def __init__(self, servers: List[ServerContext], active_id: Optional[str] = None):
        super().__init__()
        self.servers = list(servers)
        self.active_id = active_id

    def compose(self) -> ComposeResult:
        with Container(id="server-container"):
            yield Static("Select Server", id="server-title")
            if self.servers:
                options = [
                    Option(self._format_label(server), id=server.id)
                    for server in self.servers
                ]
            else:
                options = [Option("No server available", disabled=True)]
            yield OptionList(*options, id="server-list")
            yield Static("Enter Select | Esc Close", id="server-hint")

    def _format_label(self, server: ServerContext) -> str:
        marker = "*" if server.id == self.active_id else " "
        return f"{marker} {server.name} [{server.type}] - {server.user_count}/{server.max_users} users"

    def on_mount(self) -> None:
        option_list = self.query_one("#server-list", OptionList)
        option_list.focus()
        for index, server in enumerate(self.servers):
            if server.id == self.active_id:
                option_list.highlighted = index
                break

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.dismiss(event.option.id)

    def action_close(self) -> None:
        self.dismiss(None)
