# =============================================================================
# Configuration Screen
# =============================================================================
# Form for the connection profile: SMTP server, credentials, SOCKS5 port,
# tool defaults and theme.
#
# The password is never written to the profile file; Save stores it in the
# system keyring (and Load reads it back from there).
# =============================================================================

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.screen import Screen
from textual.widgets import Button, Checkbox, Footer, Header, Input, Static

from mini_mailer.config import Config, ConfigError, parse_port

# (input id, label, placeholder, is password)
FIELDS = [
    ("profile-input", "Config File", "default", False),
    ("host-input", "SMTP Host", "example.onion", False),
    ("port-input", "SMTP Port", "587", False),
    ("username-input", "Username", "", False),
    ("password-input", "Password", "", True),
    ("socks-port-input", "SOCKS5 Port", "9050", False),
    ("esub-key-input", "esub Key", "", True),
    ("hashcash-bits-input", "Hashcash Bits", "20", False),
    ("hashcash-receiver-input", "Hashcash Receiver", "", False),
    ("theme-input", "Theme", "light or dark", False),
]


class SettingsScreen(Screen):
    """Screen for loading and saving connection profiles."""

    BINDINGS = [
        Binding("ctrl+s", "save_config", "Save"),
        Binding("ctrl+o", "load_config", "Load"),
    ]

    CSS = """
    #settings-container {
        padding: 1;
    }

    .settings-field {
        height: 3;
    }

    .field-label {
        width: 20;
        padding: 1 1 0 0;
        text-align: right;
    }

    .settings-field Input {
        width: 1fr;
    }

    #settings-actions {
        height: auto;
        margin-top: 1;
        align: center middle;
    }

    #settings-actions Button {
        margin: 0 1;
    }
    """

    def compose(self) -> ComposeResult:
        """Compose the configuration form."""
        yield Header()

        with VerticalScroll(id="settings-container"):
            for field_id, label, placeholder, password in FIELDS:
                with Horizontal(classes="settings-field"):
                    yield Static(f"{label}:", classes="field-label")
                    yield Input(id=field_id, placeholder=placeholder, password=password)

            yield Checkbox("Verify TLS certificate", id="verify-tls-checkbox")

            with Horizontal(id="settings-actions"):
                yield Button("Load Config", id="load-btn")
                yield Button("Save Config", id="save-btn", variant="primary")

        yield Footer()

    def on_mount(self) -> None:
        """Show the app's current profile."""
        self._show(self.app.config)

    def _value(self, field_id: str) -> str:
        return self.query_one(f"#{field_id}", Input).value.strip()

    def _set(self, field_id: str, value: object) -> None:
        self.query_one(f"#{field_id}", Input).value = str(value)

    def _show(self, config: Config) -> None:
        """Fill the form from a profile."""
        self._set("profile-input", config.profile)
        self._set("host-input", config.smtp.host)
        self._set("port-input", config.smtp.port)
        self._set("username-input", config.smtp.username)
        try:
            self._set("password-input", config.get_password())
        except ConfigError as e:
            self._set("password-input", "")
            self.notify(str(e), severity="error")
        self._set("socks-port-input", config.proxy.socks_port)
        self._set("esub-key-input", config.tools.esub_key)
        self._set("hashcash-bits-input", config.tools.hashcash_bits)
        self._set("hashcash-receiver-input", config.tools.hashcash_receiver)
        self._set("theme-input", config.ui.theme)
        self.query_one("#verify-tls-checkbox", Checkbox).value = config.smtp.verify_tls

    def _read_form(self) -> Config:
        """
        Build a profile from the form.

        Raises:
            ConfigError: If a numeric field is invalid.
        """
        config = Config(profile=self._value("profile-input") or "default")
        config.smtp.host = self._value("host-input")
        config.smtp.port = parse_port(self._value("port-input"), "SMTP port")
        config.smtp.username = self._value("username-input")
        config.smtp.verify_tls = self.query_one("#verify-tls-checkbox", Checkbox).value
        config.proxy.socks_port = parse_port(self._value("socks-port-input"), "SOCKS5 port")
        config.tools.esub_key = self.query_one("#esub-key-input", Input).value
        config.tools.hashcash_receiver = self._value("hashcash-receiver-input")
        config.ui.theme = self._value("theme-input")

        bits = self._value("hashcash-bits-input") or "20"
        if not bits.isdigit():
            raise ConfigError(f"Hashcash bits must be a number, got {bits!r}")
        config.tools.hashcash_bits = int(bits)

        # Keep settings that have no field on this form
        current = self.app.config
        config.smtp.local_hostname = current.smtp.local_hostname
        config.smtp.timeout = current.smtp.timeout
        config.proxy.socks_host = current.proxy.socks_host
        return config

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button presses."""
        if event.button.id == "load-btn":
            self.action_load_config()
        elif event.button.id == "save-btn":
            self.action_save_config()

    def action_load_config(self) -> None:
        """Load the profile named in the Config File field."""
        profile = self._value("profile-input") or "default"
        try:
            if not Config.config_file_path(profile).exists():
                self.notify(f"Config file does not exist: {profile}", severity="error")
                return
            config = Config.load(profile)
        except ConfigError as e:
            self.notify(str(e), severity="error")
            return

        self.app.apply_config(config)
        self._show(config)
        self.notify(f"Loaded profile: {profile}", timeout=2)

    def action_save_config(self) -> None:
        """Save the form to the profile named in the Config File field."""
        try:
            config = self._read_form()
            path = config.save()
            if config.smtp.username:
                config.set_password(self.query_one("#password-input", Input).value)
        except (ConfigError, OSError) as e:
            self.notify(str(e), severity="error")
            return

        self.app.apply_config(config)
        self.notify(f"Saved {path.name}", timeout=2)
