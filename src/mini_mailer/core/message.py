# =============================================================================
# Message Assembler
# =============================================================================
# Turns the freeform text from the compose buffer into the exact bytes that
# go over the wire after SMTP DATA.
#
# Steps:
#   1. Normalize line endings to CRLF
#   2. Parse headers and resolve the From/To envelope addresses
#   3. Synthesize Message-ID and Date if the user didn't write them
#   4. Splice the synthesized lines in right after the Subject: line
#      (or at the end of the header block if there is no Subject:)
#
# Everything the user wrote is preserved byte-for-byte: header order,
# duplicate headers, and the body. We never re-fold or re-encode anything.
# =============================================================================

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime

from mini_mailer.core.headers import (
    CRLF,
    HEADER_SEPARATOR,
    extract_address,
    is_valid_address,
    parse_headers,
    split_message,
)
from mini_mailer.core.message_id import generate_message_id

# Any line break style: CRLF, lone CR, lone LF
LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


@dataclass
class AssembledMessage:
    """
    A message ready for transmission.

    Attributes:
        text: Full message text (headers, blank line, body) with CRLF endings.
        sender: Envelope sender (MAIL FROM), taken from the From header.
        recipient: Envelope recipient (RCPT TO), taken from the To header.
        message_id: Synthesized Message-ID, or None if the user supplied one.
        date: Synthesized Date, or None if the user supplied one.
    """
    text: str
    sender: str
    recipient: str
    message_id: str | None = None
    date: str | None = None

    @property
    def payload(self) -> bytes:
        """The message as bytes for the DATA phase."""
        return self.text.encode("utf-8")


def normalize_line_endings(text: str) -> str:
    """Convert every line break (CRLF, CR or LF) to CRLF."""
    return LINE_BREAK_RE.sub(CRLF, text)


def format_date(when: datetime) -> str:
    """
    Format a datetime as an RFC 1123 date with a numeric zone, in UTC.

    Example:
        >>> format_date(datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))
        'Mon, 15 Jan 2024 10:30:00 +0000'
    """
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return format_datetime(when.astimezone(timezone.utc))


def assemble_message(raw_text: str, *, now: datetime | None = None) -> AssembledMessage:
    """
    Build the wire form of a composed message.

    Args:
        raw_text: Text from the compose buffer (any line ending style).
        now: Time to use for a synthesized Date header. Defaults to now (UTC).

    Returns:
        AssembledMessage with the final text and envelope addresses.

    Raises:
        PreconditionError: If the From or To address is missing or invalid.
            This is checked before anything else happens, so no network
            I/O is ever attempted for such a message.
    """
    text = normalize_line_endings(raw_text)
    headers = parse_headers(text)

    sender = extract_address(headers, "from")
    recipient = extract_address(headers, "to")
    if not is_valid_address(sender) or not is_valid_address(recipient):
        raise PreconditionError("Invalid 'From' or 'To' address")

    # Synthesize whatever is missing. Order matters: Message-ID then Date.
    message_id = None
    date = None
    extra_lines = []
    if "message-id" not in headers:
        message_id = generate_message_id()
        extra_lines.append(f"Message-ID: {message_id}")
    if "date" not in headers:
        date = format_date(now or datetime.now(timezone.utc))
        extra_lines.append(f"Date: {date}")

    header_block, body = split_message(text)

    if not extra_lines and body is not None:
        # Nothing to add - send exactly what was written
        return AssembledMessage(text=text, sender=sender, recipient=recipient)

    lines = header_block.split(CRLF)
    if body is None:
        # Header-only input may end with a line break; don't keep empty lines
        while lines and lines[-1] == "":
            lines.pop()

    lines = _splice_after_subject(lines, extra_lines)
    assembled = CRLF.join(lines) + HEADER_SEPARATOR
    if body is not None:
        assembled += body

    return AssembledMessage(
        text=assembled,
        sender=sender,
        recipient=recipient,
        message_id=message_id,
        date=date,
    )


def _splice_after_subject(lines: list[str], extra_lines: list[str]) -> list[str]:
    """
    Insert extra header lines right after the first Subject: line.

    Falls back to appending at the end of the header block when there is
    no Subject: line. The original lines keep their relative order.
    """
    for index, line in enumerate(lines):
        if line.lower().startswith("subject:"):
            return lines[:index + 1] + extra_lines + lines[index + 1:]
    return lines + extra_lines


# =============================================================================
# Exceptions
# =============================================================================

class MessageError(Exception):
    """Base exception for message assembly."""
    pass


class PreconditionError(MessageError):
    """Raised when a message can't be sent as written (e.g. bad From/To)."""
    pass
