# =============================================================================
# Configuration Management
# =============================================================================
# Handles loading, saving, and validating Mini-Mailer configuration.
#
# XDG Base Directory Compliance (https://specifications.freedesktop.org/basedir-spec/):
#   - Config:  $XDG_CONFIG_HOME/mini-mailer/  (default: ~/.config/mini-mailer/)
#   - State:   $XDG_STATE_HOME/mini-mailer/   (default: ~/.local/state/mini-mailer/)
#
# Files:
#   - config.toml: Default connection profile
#   - <name>.toml: Named profiles (selected with --profile or the Config tab)
#   - templates.json: Saved message templates
#   - mini-mailer.log: Debug log (in state directory, only with --debug)
#
# Passwords are NOT written to the TOML files. They live in the system
# keyring under the service "mini-mailer:<profile>".
# =============================================================================

import os
import tomllib  # Built into Python 3.11+
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import keyring
import tomli_w  # For writing TOML (tomllib is read-only)
from keyring.errors import KeyringError, PasswordDeleteError

from mini_mailer.smtp import TransportSettings


# =============================================================================
# XDG Directory Management
# =============================================================================

# Application identifier used in all XDG paths
APP_NAME = "mini-mailer"

# Profile name used when none is given
DEFAULT_PROFILE = "default"

CONFIG_EXTENSION = ".toml"

# config.toml already belongs to the default profile
RESERVED_PROFILES = ("config",)

THEMES = ("dark", "light")


def get_xdg_config_home() -> Path:
    """
    Returns the XDG config directory for Mini-Mailer.

    Respects $XDG_CONFIG_HOME if set, otherwise uses ~/.config/mini-mailer/
    This is where profiles and templates live.
    """
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        base = Path(xdg_config)
    else:
        base = Path.home() / ".config"
    return base / APP_NAME


def get_xdg_state_home() -> Path:
    """
    Returns the XDG state directory for Mini-Mailer.

    Respects $XDG_STATE_HOME if set, otherwise uses ~/.local/state/mini-mailer/
    This is where the debug log is written.
    """
    xdg_state = os.environ.get("XDG_STATE_HOME")
    if xdg_state:
        base = Path(xdg_state)
    else:
        base = Path.home() / ".local" / "state"
    return base / APP_NAME


def ensure_directories() -> dict[str, Path]:
    """
    Creates all required XDG directories if they don't exist.

    Returns:
        Dictionary mapping directory type to path.
    """
    dirs = {
        "config": get_xdg_config_home(),
        "state": get_xdg_state_home(),
    }

    for dir_path in dirs.values():
        dir_path.mkdir(parents=True, exist_ok=True)

    return dirs


# =============================================================================
# Configuration Data Structures
# =============================================================================

@dataclass
class SMTPConfig:
    """
    SMTP server settings.

    Attributes:
        host: Server hostname (often an .onion address).
        port: Server port (587 for submission with STARTTLS).
        username: Login for AUTH PLAIN. Leave empty to skip authentication.
        local_hostname: Name sent in EHLO. Empty means "use the server host".
        verify_tls: Verify the server certificate after STARTTLS.
        timeout: Seconds allowed for connecting and for each SMTP round trip.
    """
    host: str = ""
    port: int = 587
    username: str = ""
    local_hostname: str = ""
    verify_tls: bool = False
    timeout: float = 60.0


@dataclass
class ProxyConfig:
    """
    Local SOCKS5 proxy settings.

    Attributes:
        socks_host: Proxy address. Almost always localhost.
        socks_port: Proxy port (9050 for the Tor daemon, 9150 for Tor Browser).
    """
    socks_host: str = "127.0.0.1"
    socks_port: int = 9050


@dataclass
class ToolsConfig:
    """
    Defaults for the Tools menu.

    Attributes:
        esub_key: Passphrase pre-filled in the esub dialog.
        hashcash_bits: Default hashcash difficulty.
        hashcash_receiver: Default hashcash resource string.
    """
    esub_key: str = ""
    hashcash_bits: int = 20
    hashcash_receiver: str = ""


@dataclass
class UIConfig:
    """
    Configuration for the user interface.

    Attributes:
        theme: Color theme ("dark" or "light").
    """
    theme: str = "dark"


@dataclass
class Config:
    """
    A connection profile.

    Each profile is one TOML file; the default profile is config.toml.

    Attributes:
        profile: Name of this profile (not stored in the file).
        smtp: SMTP server settings.
        proxy: SOCKS5 proxy settings.
        tools: Tools menu defaults.
        ui: User interface configuration.

    Usage:
        >>> config = Config.load("work")
        >>> settings = config.transport_settings()
    """
    profile: str = DEFAULT_PROFILE
    smtp: SMTPConfig = field(default_factory=SMTPConfig)
    proxy: ProxyConfig = field(default_factory=ProxyConfig)
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    ui: UIConfig = field(default_factory=UIConfig)

    # -------------------------------------------------------------------------
    # File Paths
    # -------------------------------------------------------------------------

    @staticmethod
    def config_file_path(profile: str | None = None) -> Path:
        """
        Returns the path of a profile's TOML file.

        Raises:
            ConfigError: If the name is reserved or is not a plain file name.
        """
        if not profile or profile == DEFAULT_PROFILE:
            return get_xdg_config_home() / "config.toml"
        validate_profile_name(profile)
        return get_xdg_config_home() / f"{profile}{CONFIG_EXTENSION}"

    @staticmethod
    def templates_path() -> Path:
        """Returns the path to the templates file."""
        return get_xdg_config_home() / "templates.json"

    @staticmethod
    def log_file_path() -> Path:
        """Returns the path to the debug log."""
        return get_xdg_state_home() / "mini-mailer.log"

    @property
    def keyring_service(self) -> str:
        """
        Service name used for keyring password storage.

            keyring get mini-mailer:default <username>
        """
        return f"{APP_NAME}:{self.profile}"

    # -------------------------------------------------------------------------
    # Loading and Saving
    # -------------------------------------------------------------------------

    @classmethod
    def load(cls, profile: str | None = None) -> "Config":
        """
        Load a profile from disk.

        If the profile file doesn't exist, returns default configuration.

        Args:
            profile: Profile name. None means the default profile.

        Returns:
            Loaded Config object.

        Raises:
            ConfigError: If the profile name is invalid, or the file exists
                but is invalid.
        """
        ensure_directories()

        profile = profile or DEFAULT_PROFILE
        config_path = cls.config_file_path(profile)

        if not config_path.exists():
            # No profile yet - return defaults
            return cls(profile=profile)

        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file {config_path}: {e}") from e

        return cls._from_dict(data, profile)

    def save(self) -> Path:
        """
        Save the profile to its TOML file.

        Returns:
            Path that was written.

        Raises:
            ConfigError: If the theme is not "light" or "dark".
        """
        self.ui.theme = self.ui.theme.strip().lower()
        if self.ui.theme not in THEMES:
            raise ConfigError("Theme must be either 'light' or 'dark'")

        ensure_directories()

        config_path = self.config_file_path(self.profile)
        with open(config_path, "wb") as f:
            tomli_w.dump(self._to_dict(), f)

        return config_path

    @classmethod
    def _from_dict(cls, data: dict[str, Any], profile: str) -> "Config":
        """
        Create a Config object from a dictionary (parsed TOML).
        """
        config = cls(profile=profile)

        smtp = data.get("smtp", {})
        config.smtp = SMTPConfig(
            host=smtp.get("host", ""),
            port=smtp.get("port", 587),
            username=smtp.get("username", ""),
            local_hostname=smtp.get("local_hostname", ""),
            verify_tls=smtp.get("verify_tls", False),
            timeout=smtp.get("timeout", 60.0),
        )

        proxy = data.get("proxy", {})
        config.proxy = ProxyConfig(
            socks_host=proxy.get("socks_host", "127.0.0.1"),
            socks_port=proxy.get("socks_port", 9050),
        )

        tools = data.get("tools", {})
        config.tools = ToolsConfig(
            esub_key=tools.get("esub_key", ""),
            hashcash_bits=tools.get("hashcash_bits", 20),
            hashcash_receiver=tools.get("hashcash_receiver", ""),
        )

        ui = data.get("ui", {})
        config.ui = UIConfig(theme=ui.get("theme", "dark"))

        return config

    def _to_dict(self) -> dict[str, Any]:
        """
        Convert Config to a dictionary for TOML serialization.
        """
        return {
            "smtp": {
                "host": self.smtp.host,
                "port": self.smtp.port,
                "username": self.smtp.username,
                "local_hostname": self.smtp.local_hostname,
                "verify_tls": self.smtp.verify_tls,
                "timeout": self.smtp.timeout,
            },
            "proxy": {
                "socks_host": self.proxy.socks_host,
                "socks_port": self.proxy.socks_port,
            },
            "tools": {
                "esub_key": self.tools.esub_key,
                "hashcash_bits": self.tools.hashcash_bits,
                "hashcash_receiver": self.tools.hashcash_receiver,
            },
            "ui": {
                "theme": self.ui.theme,
            },
        }

    # -------------------------------------------------------------------------
    # Credentials
    # -------------------------------------------------------------------------

    def get_password(self) -> str:
        """
        Look up the SMTP password in the system keyring.

        Returns:
            The password, or "" if there is no username or no stored password.

        Raises:
            ConfigError: If the keyring is unavailable.
        """
        if not self.smtp.username:
            return ""
        try:
            return keyring.get_password(self.keyring_service, self.smtp.username) or ""
        except KeyringError as e:
            raise ConfigError(f"Keyring error: {e}") from e

    def set_password(self, password: str) -> None:
        """Store (or, with an empty password, remove) the SMTP password."""
        if not self.smtp.username:
            raise ConfigError("Set a username before saving a password")

        try:
            if password:
                keyring.set_password(self.keyring_service, self.smtp.username, password)
            else:
                keyring.delete_password(self.keyring_service, self.smtp.username)
        except PasswordDeleteError:
            pass  # Nothing stored
        except KeyringError as e:
            raise ConfigError(f"Keyring error: {e}") from e

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def transport_settings(self, password: str | None = None) -> TransportSettings:
        """
        Build transport settings for a send.

        Args:
            password: Password to use. Looked up in the keyring if None.

        Raises:
            ConfigError: If the host is missing or a port is invalid.
        """
        if not self.smtp.host:
            raise ConfigError("SMTP host is not configured")

        return TransportSettings(
            host=self.smtp.host,
            port=parse_port(self.smtp.port, "SMTP port"),
            socks_port=parse_port(self.proxy.socks_port, "SOCKS5 port"),
            socks_host=self.proxy.socks_host,
            username=self.smtp.username,
            password=self.get_password() if password is None else password,
            verify_tls=self.smtp.verify_tls,
            local_hostname=self.smtp.local_hostname,
            timeout=float(self.smtp.timeout),
        )


# =============================================================================
# Exceptions
# =============================================================================

class ConfigError(Exception):
    """Raised when there's an error loading, saving or using configuration."""
    pass


# =============================================================================
# Utility Functions
# =============================================================================

def parse_port(value: int | str, label: str = "Port") -> int:
    """
    Parse and range-check a TCP port.

    Raises:
        ConfigError: If the value is not an integer in 1..65535.
    """
    try:
        port = int(str(value).strip())
    except ValueError as e:
        raise ConfigError(f"{label} must be a number, got {value!r}") from e
    if not 0 < port < 65536:
        raise ConfigError(f"{label} must be between 1 and 65535, got {port}")
    return port


def validate_profile_name(profile: str) -> None:
    """
    Check that a profile name maps to its own file in the config directory.

    Raises:
        ConfigError: If the name is reserved or is not a plain file name.
    """
    if profile in RESERVED_PROFILES:
        raise ConfigError(
            f"Profile name {profile!r} is reserved (it is the {DEFAULT_PROFILE} profile's file)"
        )
    if profile.startswith(".") or "/" in profile or "\\" in profile:
        raise ConfigError(f"Invalid profile name: {profile!r}")


def list_profiles() -> list[str]:
    """Names of all profiles that exist on disk (default first)."""
    config_dir = get_xdg_config_home()
    if not config_dir.exists():
        return []

    names = []
    for path in sorted(config_dir.glob(f"*{CONFIG_EXTENSION}")):
        names.append(DEFAULT_PROFILE if path.stem == "config" else path.stem)

    if DEFAULT_PROFILE in names:
        names.remove(DEFAULT_PROFILE)
        names.insert(0, DEFAULT_PROFILE)
    return names


def print_paths() -> None:
    """
    Print all XDG paths for debugging.
    Useful for users wondering where their config is stored.
    """
    print(f"Config:  {get_xdg_config_home()}")
    print(f"State:   {get_xdg_state_home()}")
    print()
    print(f"Config file:  {Config.config_file_path()}")
    print(f"Templates:    {Config.templates_path()}")
    print(f"Log file:     {Config.log_file_path()}")
