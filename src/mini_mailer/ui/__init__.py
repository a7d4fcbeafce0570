# =============================================================================
# UI Module
# =============================================================================
# Textual-based user interface for Mini-Mailer.
#
# Structure:
#   - screens/: Compose, Templates and Configuration screens plus the
#     Tools dialogs
# =============================================================================

from mini_mailer.ui.screens import (
    ComposeScreen,
    EsubScreen,
    HashcashScreen,
    MimeSubjectScreen,
    SettingsScreen,
    TemplatesScreen,
)

__all__ = [
    "ComposeScreen",
    "TemplatesScreen",
    "SettingsScreen",
    "EsubScreen",
    "HashcashScreen",
    "MimeSubjectScreen",
]
