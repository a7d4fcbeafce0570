# =============================================================================
# Mini-Mailer Main Application
# =============================================================================
# This is the main Textual application class that orchestrates the UI.
#
# The application consists of:
#   - Screens: Compose, Templates, Configuration (switched with F1-F3)
#   - Tools: Modal dialogs for esub, hashcash and MIME subjects (F5-F7)
#   - Bindings: Keyboard shortcuts
#
# The app manages:
#   - Configuration (the active connection profile)
#   - The shared template store
#   - Screen navigation
# =============================================================================

import argparse
import logging
import sys

from textual.app import App
from textual.binding import Binding

from mini_mailer import __app_name__, __version__
from mini_mailer.config import Config, ConfigError, ensure_directories, print_paths
from mini_mailer.storage import TemplateError, TemplateStore
from mini_mailer.ui.screens import (
    ComposeScreen,
    EsubScreen,
    HashcashScreen,
    MimeSubjectScreen,
    SettingsScreen,
    TemplatesScreen,
)

logger = logging.getLogger(__name__)

# Profile theme -> Textual theme
TEXTUAL_THEMES = {
    "dark": "textual-dark",
    "light": "textual-light",
}


class MiniMailerApp(App):
    """
    The main Mini-Mailer application.

    Attributes:
        config: The active connection profile.
        templates: Template store shared by the Compose and Templates screens.
    """

    TITLE = "Mini-Mailer"
    SUB_TITLE = "Raw SMTP over SOCKS5"

    # Global keybindings - these work from any screen
    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", priority=True),
        Binding("f1", "switch_screen('compose')", "Compose"),
        Binding("f2", "switch_screen('templates')", "Templates"),
        Binding("f3", "switch_screen('settings')", "Config"),
        Binding("f5", "esub", "esub"),
        Binding("f6", "hashcash", "Hashcash"),
        Binding("f7", "mime_subject", "MIME Subject"),
    ]

    SCREENS = {
        "compose": ComposeScreen,
        "templates": TemplatesScreen,
        "settings": SettingsScreen,
    }

    def __init__(self, config: Config | None = None, profile: str | None = None) -> None:
        """
        Initialize the application.

        Args:
            config: Optional pre-loaded profile. If not provided, the profile
                    named by `profile` is loaded from disk.
            profile: Profile name used when loading.
        """
        super().__init__()

        # Errors are shown once the UI is up
        self._startup_errors: list[str] = []

        if config is None:
            try:
                config = Config.load(profile)
            except ConfigError as e:
                config = Config(profile=profile or "default")
                self._startup_errors.append(f"Config error: {e}")
        self.config = config

        self.templates = TemplateStore(Config.templates_path())
        try:
            self.templates.load()
        except (TemplateError, OSError) as e:
            self._startup_errors.append(str(e))

    async def on_mount(self) -> None:
        """Called when the application is mounted and ready."""
        self.apply_config(self.config)

        for error in self._startup_errors:
            self.notify(error, severity="error", timeout=10)

        await self.push_screen("compose")

    def apply_config(self, config: Config) -> None:
        """Make a profile the active one."""
        self.config = config
        self.theme = TEXTUAL_THEMES.get(config.ui.theme, TEXTUAL_THEMES["dark"])
        self.sub_title = f"Profile: {config.profile}"
        logger.info(f"Active profile: {config.profile}")

    # -------------------------------------------------------------------------
    # Action Handlers
    # -------------------------------------------------------------------------

    def action_esub(self) -> None:
        """Open the esub dialog."""
        self.push_screen(EsubScreen(key=self.config.tools.esub_key))

    def action_hashcash(self) -> None:
        """Open the hashcash dialog."""
        self.push_screen(
            HashcashScreen(
                bits=self.config.tools.hashcash_bits,
                receiver=self.config.tools.hashcash_receiver,
            )
        )

    def action_mime_subject(self) -> None:
        """Open the MIME subject dialog."""
        self.push_screen(MimeSubjectScreen())


# =============================================================================
# CLI Entry Point
# =============================================================================

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog=__app_name__,
        description="Mini-Mailer: compose raw email and send it over SOCKS5 with STARTTLS",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--paths",
        action="store_true",
        help="Print configuration paths and exit",
    )

    parser.add_argument(
        "--profile",
        metavar="NAME",
        help="Connection profile to load (default: config.toml)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Write a debug log to the state directory",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool) -> None:
    """
    Configure logging.

    The TUI owns the terminal, so nothing is logged to stdout. With --debug,
    everything at DEBUG and above goes to mini-mailer.log in the state
    directory.
    """
    root = logging.getLogger("mini_mailer")
    if not debug:
        root.addHandler(logging.NullHandler())
        return

    ensure_directories()
    handler = logging.FileHandler(Config.log_file_path(), encoding="utf-8")
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for Mini-Mailer.

    This function:
        1. Parses command-line arguments
        2. Handles special commands (--paths, --version)
        3. Configures logging
        4. Starts the Textual application

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = parse_args(argv)

    # Handle --paths flag
    if args.paths:
        print_paths()
        return 0

    setup_logging(args.debug)
    logger.info(f"Starting {__app_name__} {__version__}")

    app = MiniMailerApp(profile=args.profile)
    app.run()

    return 0


if __name__ == "__main__":
    sys.exit(main())
