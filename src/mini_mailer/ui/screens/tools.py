# =============================================================================
# Tools Dialogs
# =============================================================================
# Modal dialogs for the Tools menu:
#   - EsubScreen: generate an esub token (copied to the clipboard) or verify one
#   - HashcashScreen: mint a hashcash stamp (copied to the clipboard)
#   - MimeSubjectScreen: RFC 2047 encode a Subject (copied to the clipboard)
#
# Key derivation and hashcash minting are slow, so they run in workers and
# the dialog stays responsive.
# =============================================================================

import asyncio

from textual import work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Static

from mini_mailer.tools import HashcashError, encode_subject, esub, generate_stamp

# Shared by all three dialogs; the ids are per-dialog
DIALOG_CSS = """
.tool-dialog {
    width: 70;
    height: auto;
    padding: 1 2;
    background: $surface;
    border: thick $primary;
}

.tool-title {
    text-align: center;
    text-style: bold;
    margin-bottom: 1;
}

.tool-dialog Input {
    margin-bottom: 1;
}

.tool-result {
    color: $text-muted;
    margin-bottom: 1;
    height: auto;
}

.tool-buttons {
    align: center middle;
    height: auto;
}

.tool-buttons Button {
    margin: 0 1;
}
"""


class ToolScreen(ModalScreen[None]):
    """Base for the Tools dialogs: centered, Escape closes."""

    BINDINGS = [
        Binding("escape", "cancel", "Close"),
    ]

    DEFAULT_CSS = DIALOG_CSS

    def _show_result(self, text: str) -> None:
        self.query_one(".tool-result", Static).update(text)

    def _copy(self, text: str, what: str) -> None:
        self.app.copy_to_clipboard(text)
        self._show_result(text)
        self.notify(f"{what} copied to clipboard", timeout=2)

    def action_cancel(self) -> None:
        """Close the dialog."""
        self.dismiss(None)


class EsubScreen(ToolScreen):
    """
    Generate or verify an esub token.

    The key field is pre-filled from the profile's tools.esub_key.
    """

    CSS = """
    EsubScreen {
        align: center middle;
    }
    """

    def __init__(self, key: str = "") -> None:
        super().__init__()
        self._key = key

    def compose(self) -> ComposeResult:
        with Vertical(classes="tool-dialog"):
            yield Static("esub", classes="tool-title")
            yield Input(value=self._key, placeholder="Key", password=True, id="esub-key")
            yield Input(placeholder="Token to verify", id="esub-token")
            yield Static("", classes="tool-result")
            with Horizontal(classes="tool-buttons"):
                yield Button("Generate", id="generate-btn", variant="primary")
                yield Button("Verify", id="verify-btn")
                yield Button("Close", id="close-btn")

    def on_mount(self) -> None:
        self.query_one("#esub-key", Input).focus()

    def _key_value(self) -> str | None:
        key = self.query_one("#esub-key", Input).value
        if not key:
            self.notify("Key cannot be empty", severity="error")
            return None
        return key

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button presses."""
        if event.button.id == "close-btn":
            self.action_cancel()
            return

        key = self._key_value()
        if key is None:
            return

        if event.button.id == "generate-btn":
            self._show_result("Deriving key...")
            self._generate(key)
        elif event.button.id == "verify-btn":
            token = self.query_one("#esub-token", Input).value.strip()
            if not token:
                self.notify("Token cannot be empty", severity="error")
                return
            self._show_result("Deriving key...")
            self._verify(token, key)

    @work(group="esub", exclusive=True)
    async def _generate(self, key: str) -> None:
        token = await asyncio.to_thread(esub.generate, key)
        self._copy(token, "esub token")

    @work(group="esub", exclusive=True)
    async def _verify(self, token: str, key: str) -> None:
        if await asyncio.to_thread(esub.verify, token, key):
            self._show_result("Valid token")
            self.notify("esub token is valid", timeout=3)
        else:
            self._show_result("Invalid token")
            self.notify("esub token is NOT valid", severity="error")


class HashcashScreen(ToolScreen):
    """Mint a hashcash stamp with the external hashcash binary."""

    CSS = """
    HashcashScreen {
        align: center middle;
    }
    """

    def __init__(self, bits: int = 20, receiver: str = "") -> None:
        super().__init__()
        self._bits = bits
        self._receiver = receiver

    def compose(self) -> ComposeResult:
        with Vertical(classes="tool-dialog"):
            yield Static("Hashcash", classes="tool-title")
            yield Input(value=str(self._bits), placeholder="Bits", id="hashcash-bits")
            yield Input(value=self._receiver, placeholder="Receiver", id="hashcash-receiver")
            yield Static("", classes="tool-result")
            with Horizontal(classes="tool-buttons"):
                yield Button("Generate", id="generate-btn", variant="primary")
                yield Button("Close", id="close-btn")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button presses."""
        if event.button.id == "close-btn":
            self.action_cancel()
        elif event.button.id == "generate-btn":
            bits = self.query_one("#hashcash-bits", Input).value.strip()
            receiver = self.query_one("#hashcash-receiver", Input).value.strip()
            self._show_result("Minting stamp...")
            self._mint(bits, receiver)

    @work(group="hashcash", exclusive=True)
    async def _mint(self, bits: str, receiver: str) -> None:
        try:
            stamp = await generate_stamp(bits, receiver)
        except HashcashError as e:
            self._show_result("")
            self.notify(str(e), severity="error")
            return
        self._copy(stamp, "Hashcash stamp")


class MimeSubjectScreen(ToolScreen):
    """Encode a Subject line for non-ASCII text."""

    CSS = """
    MimeSubjectScreen {
        align: center middle;
    }
    """

    def compose(self) -> ComposeResult:
        with Vertical(classes="tool-dialog"):
            yield Static("MIME Subject", classes="tool-title")
            yield Input(placeholder="Subject", id="mime-subject")
            yield Static("", classes="tool-result")
            with Horizontal(classes="tool-buttons"):
                yield Button("Encode", id="encode-btn", variant="primary")
                yield Button("Close", id="close-btn")

    def on_mount(self) -> None:
        self.query_one("#mime-subject", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._encode()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button presses."""
        if event.button.id == "close-btn":
            self.action_cancel()
        elif event.button.id == "encode-btn":
            self._encode()

    def _encode(self) -> None:
        subject = self.query_one("#mime-subject", Input).value
        if not subject:
            self.notify("Subject cannot be empty", severity="error")
            return
        self._copy(encode_subject(subject), "Encoded subject")
