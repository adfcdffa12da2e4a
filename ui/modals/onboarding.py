"""Onboarding Modal Screen - One-time early access notice"""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Button, Static


ONBOARDING_TEXT = """\
We're thrilled to have you join us in this early phase of the Live Flight Map.
As it is still in early development, you might run into bugs or features that
aren't quite polished yet.

[bold]What to expect:[/bold]
 - Regular updates and improvements
 - New features being added frequently
 - Your feedback shaping the future of the project

[dim]Thank you for being part of this journey![/dim]
"""


class OnboardingScreen(ModalScreen):
    """Modal shown once on first launch"""

    CSS = """
    OnboardingScreen {
        align: center middle;
    }

    #onboarding-container {
        width: 72;
        height: auto;
        background: $surface;
        border: thick $warning;
        padding: 1 2;
    }

    #onboarding-title {
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
        color: $warning;
    }

    #onboarding-button {
        width: 100%;
        margin-top: 1;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Close", priority=True),
    ]

    def compose(self) -> ComposeResult:
        with Container(id="onboarding-container"):
            yield Static("Early Access", id="onboarding-title")
            yield Static(ONBOARDING_TEXT, id="onboarding-text")
            yield Button("Got it", variant="primary", id="onboarding-button")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(True)

    def action_close(self) -> None:
        self.dismiss(True)
