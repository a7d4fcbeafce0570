# =============================================================================
# Mini-Mailer: Raw Email over SOCKS5
# =============================================================================
#
# Mini-Mailer is a terminal mail composer. You type the message exactly as
# it should go on the wire, and it is delivered to one SMTP server through
# a local SOCKS5 proxy (usually Tor), upgraded with STARTTLS.
#
# Features:
#   - Raw header/body editor with Message-ID and Date filled in
#   - SOCKS5 + STARTTLS + optional AUTH PLAIN
#   - Live per-stage send status
#   - Templates, profiles, keyring-stored passwords
#   - Tools: esub tokens, hashcash stamps, MIME-encoded subjects
#   - XDG Base Directory compliant
#
# =============================================================================

__version__ = "0.1.0"
__app_name__ = "mini-mailer"

# Main entry point - this is what gets called by the 'mini-mailer' command
from mini_mailer.app import main

__all__ = ["main", "__version__", "__app_name__"]
