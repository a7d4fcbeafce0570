# =============================================================================
# UI Screens
# =============================================================================
# Full-screen views for the application.
#
# The app switches between three screens (F1-F3):
#   - ComposeScreen: Raw message editor and Send
#   - TemplatesScreen: Saved message skeletons
#   - SettingsScreen: Connection profile form
#
# The Tools menu (F5-F7) opens modal dialogs on top of the current screen.
# =============================================================================

from mini_mailer.ui.screens.compose import ComposeScreen
from mini_mailer.ui.screens.settings import SettingsScreen
from mini_mailer.ui.screens.templates import TemplatesScreen
from mini_mailer.ui.screens.tools import EsubScreen, HashcashScreen, MimeSubjectScreen

__all__ = [
    "ComposeScreen",
    "TemplatesScreen",
    "SettingsScreen",
    "EsubScreen",
    "HashcashScreen",
    "MimeSubjectScreen",
]
