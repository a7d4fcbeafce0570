# =============================================================================
# Compose Screen
# =============================================================================
# Screen for writing a raw message and sending it.
#
# The editor holds the whole message as typed: header lines, a blank line,
# then the body. Nothing is generated for the user except Message-ID and
# Date (added at send time if missing).
#
# Sending runs in a background worker that follows the session's status
# stream, so every pipeline stage shows up in the status line in order.
# =============================================================================

from textual import work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Static, TextArea

from mini_mailer.config import ConfigError
from mini_mailer.core import PreconditionError
from mini_mailer.smtp import MailSender, SendSession

READY_TEXT = "Ready to send"


class ComposeScreen(Screen):
    """
    Screen for composing and sending raw messages.

    Keybindings:
        - Ctrl+S: Send
        - Ctrl+V: Paste (from the app clipboard, e.g. a copied template)
        - Ctrl+L: Clear the editor
    """

    BINDINGS = [
        Binding("ctrl+s", "send", "Send"),
        Binding("ctrl+v", "paste_template", "Paste", show=False),
        Binding("ctrl+l", "clear", "Clear"),
    ]

    CSS = """
    #compose-container {
        padding: 1;
    }

    #message-editor {
        height: 1fr;
        min-height: 10;
        border: tall $primary;
    }

    #compose-actions {
        height: auto;
        margin-top: 1;
        align: center middle;
    }

    #compose-actions Button {
        margin: 0 1;
    }

    #status-display {
        height: 1;
        margin-top: 1;
        color: $text-muted;
        text-align: center;
    }
    """

    def compose(self) -> ComposeResult:
        """
        Compose the compose screen layout.

        Layout:
        ┌─────────────────────────────────────────────────┐
        │                    Header                        │
        ├─────────────────────────────────────────────────┤
        │ From: ...                                        │
        │ To: ...                                          │
        │ Subject: ...                                     │
        │                                                  │
        │ body                                             │
        ├─────────────────────────────────────────────────┤
        │ [Paste Template] [Clear] [Clear Clipboard] [Send]│
        │                 Ready to send                    │
        └─────────────────────────────────────────────────┘
        """
        yield Header()

        with Vertical(id="compose-container"):
            yield TextArea("", id="message-editor", soft_wrap=True)

            with Horizontal(id="compose-actions"):
                yield Button("Paste Template", id="paste-btn")
                yield Button("Clear Canvas", id="clear-btn")
                yield Button("Clear Clipboard", id="clear-clipboard-btn")
                yield Button("Send Email", id="send-btn", variant="primary")

            yield Static(READY_TEXT, id="status-display")

        yield Footer()

    def load_message(self, text: str) -> None:
        """Replace the editor contents."""
        self.query_one("#message-editor", TextArea).text = text

    def _update_status(self, text: str) -> None:
        """Update the status display."""
        self.query_one("#status-display", Static).update(text)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button presses."""
        if event.button.id == "send-btn":
            self.action_send()
        elif event.button.id == "paste-btn":
            self.action_paste_template()
        elif event.button.id == "clear-btn":
            self.action_clear()
        elif event.button.id == "clear-clipboard-btn":
            self.app.copy_to_clipboard("")
            self.notify("Clipboard cleared", timeout=2)

    def action_paste_template(self) -> None:
        """Replace the editor with the clipboard contents."""
        content = self.app.clipboard
        if not content:
            self.notify("Clipboard is empty", severity="error")
            return
        self.load_message(content)

    def action_clear(self) -> None:
        """Empty the editor."""
        self.load_message("")
        self._update_status(READY_TEXT)

    def action_send(self) -> None:
        """Validate the message and start sending it in the background."""
        text = self.query_one("#message-editor", TextArea).text

        try:
            settings = self.app.config.transport_settings()
        except ConfigError as e:
            self.notify(str(e), severity="error")
            return

        try:
            session = MailSender(settings).send(text)
        except PreconditionError as e:
            self.notify(str(e), severity="error")
            return

        self._update_status("Starting SMTP session...")
        self._follow_session(session)

    @work(group="send")
    async def _follow_session(self, session: SendSession) -> None:
        """Background worker that mirrors a session's status stream."""
        async for update in session.updates():
            self._update_status(update.text)

        result = await session.wait()
        if result.success:
            self.notify(f"Email sent to {session.message.recipient}", timeout=3)
        else:
            self.notify(result.status_text, severity="error")
