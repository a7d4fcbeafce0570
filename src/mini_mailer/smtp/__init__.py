# =============================================================================
# SMTP Module
# =============================================================================
# Handles sending email through a SOCKS5 proxy with STARTTLS.
#
# Features:
#   - SOCKS5 tunnel (PySocks) to the SMTP server
#   - STARTTLS upgrade with optional certificate verification
#   - Optional AUTH PLAIN
#   - Per-stage status stream for the UI
# =============================================================================

from mini_mailer.smtp.sender import MailSender, SendSession
from mini_mailer.smtp.status import (
    SendResult,
    Stage,
    StatusStream,
    StatusUpdate,
)
from mini_mailer.smtp.transport import (
    SMTPError,
    SMTPTransport,
    TransportSettings,
    TransportStageError,
)

__all__ = [
    "MailSender",
    "SendSession",
    "SendResult",
    "Stage",
    "StatusStream",
    "StatusUpdate",
    "SMTPTransport",
    "TransportSettings",
    "SMTPError",
    "TransportStageError",
]
