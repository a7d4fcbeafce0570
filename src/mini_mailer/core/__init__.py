# =============================================================================
# Mini-Mailer Core Module
# =============================================================================
# Pure message-handling code with no I/O and no third-party dependencies:
#   - HeaderSet: Ordered, case-insensitive view of the header block
#   - assemble_message: Compose buffer -> wire text + envelope addresses
#   - generate_message_id: Anonymous Message-ID values
# =============================================================================

from mini_mailer.core.headers import (
    HeaderSet,
    extract_address,
    is_valid_address,
    parse_headers,
)
from mini_mailer.core.message import (
    AssembledMessage,
    MessageError,
    PreconditionError,
    assemble_message,
    format_date,
    normalize_line_endings,
)
from mini_mailer.core.message_id import generate_message_id

__all__ = [
    "HeaderSet",
    "parse_headers",
    "extract_address",
    "is_valid_address",
    "AssembledMessage",
    "assemble_message",
    "normalize_line_endings",
    "format_date",
    "generate_message_id",
    "MessageError",
    "PreconditionError",
]
