"""
ShieldFlow TUI - Dialog Components
Modal dialogs for user interaction
"""

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import Button, Static
from textual.screen import ModalScreen

from .. import __version__
from ..core.constants import APP_NAME


class ConfirmDialog(ModalScreen[bool]):
    """Confirmation dialog"""

    CSS = """
    ConfirmDialog {
        align: center middle;
    }

    #dialog {
        width: 50;
        height: auto;
        background: $surface;
        border: thick $primary;
        padding: 1 2;
    }

    #dialog-title {
        width: 100%;
        text-align: center;
        color: $accent;
        text-style: bold;
        margin-bottom: 1;
    }

    #dialog-buttons {
        height: auto;
        margin-top: 1;
    }

    #dialog-buttons Button {
        margin-right: 1;
    }
    """

    def __init__(self, title: str, message: str):
        super().__init__()
        self.dialog_title = title
        self.dialog_message = message

    def compose(self) -> ComposeResult:
        with Container(id="dialog"):
            yield Static(self.dialog_title, id="dialog-title")
            yield Static(self.dialog_message, id="dialog-message")
            with Horizontal(id="dialog-buttons"):
                yield Button("Confirm", variant="success", id="confirm")
                yield Button("Cancel", variant="default", id="cancel")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "confirm")


class AboutDialog(ModalScreen):
    """About dialog"""

    CSS = """
    AboutDialog {
        align: center middle;
    }

    #about-dialog {
        width: 60;
        height: auto;
        background: $surface;
        border: thick $primary;
        padding: 1 2;
    }

    #about-title {
        width: 100%;
        text-align: center;
        color: $accent;
        text-style: bold;
        margin-bottom: 1;
    }

    .about-text {
        width: 100%;
        text-align: center;
        margin-bottom: 1;
    }

    .about-note {
        color: $warning;
        margin-bottom: 1;
    }

    .about-buttons {
        margin-top: 1;
        height: auto;
    }
    """

    def compose(self) -> ComposeResult:
        with Container(id="about-dialog"):
            yield Static(APP_NAME, id="about-title")
            yield Static(f"Version {__version__}", classes="about-text")
            yield Static("Built with Textual", classes="about-text")
            yield Static(
                "Architecture note: this is a front-end control panel. "
                "Connections, traffic and timings are simulated; no network "
                "interface is touched. A real client would drive a local "
                "daemon that brings up the WireGuard/OpenVPN tunnel.",
                classes="about-note"
            )

            with Horizontal(classes="about-buttons"):
                yield Button("Close", variant="primary", id="btn-close-about")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss()
