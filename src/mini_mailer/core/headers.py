# =============================================================================
# Header Model
# =============================================================================
# Parses the header block of a composed message into an ordered,
# case-insensitive header set.
#
# The composed text is freeform: the user types (or pastes from a template)
# raw header lines followed by a blank line and the body. We only need enough
# structure to:
#   - find the From/To addresses for the SMTP envelope
#   - check whether Message-ID and Date are already present
#
# Not a full RFC 5322 parser: folded (continuation) lines and lines
# without ": " are skipped.
# =============================================================================

from dataclasses import dataclass, field
from typing import Iterator

# Transport line ending and the header/body separator built from it
CRLF = "\r\n"
HEADER_SEPARATOR = CRLF + CRLF


@dataclass
class HeaderSet:
    """
    Ordered header lines plus a case-insensitive lookup index.

    The ordered sequence keeps every (name, value) pair exactly as it was
    written, including duplicates. The index maps lowercased names to the
    value of the LAST occurrence of that name.

    Attributes:
        pairs: Header (name, value) pairs in the order they were written.

    Example:
        >>> headers = parse_headers("From: a@x.com\\r\\nSubject: hi\\r\\n\\r\\nbody")
        >>> headers["FROM"]
        'a@x.com'
        >>> headers.names()
        ['From', 'Subject']
    """
    pairs: list[tuple[str, str]] = field(default_factory=list)
    _index: dict[str, str] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        for name, value in self.pairs:
            self._index[name.lower()] = value

    def add(self, name: str, value: str) -> None:
        """Append a header, updating the lookup index."""
        self.pairs.append((name, value))
        self._index[name.lower()] = value

    def get(self, name: str, default: str | None = None) -> str | None:
        """Case-insensitive lookup of a header value."""
        return self._index.get(name.lower(), default)

    def names(self) -> list[str]:
        """Header names in written order (duplicates included)."""
        return [name for name, _ in self.pairs]

    def items(self) -> list[tuple[str, str]]:
        """Ordered (name, value) pairs."""
        return list(self.pairs)

    def __getitem__(self, name: str) -> str:
        return self._index[name.lower()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)


def split_message(text: str) -> tuple[str, str | None]:
    """
    Split CRLF text into (header_block, body).

    Body is None when the text has no blank-line separator, in which case
    the whole text is treated as headers.
    """
    if HEADER_SEPARATOR not in text:
        return text, None
    header_block, body = text.split(HEADER_SEPARATOR, 1)
    return header_block, body


def parse_headers(text: str) -> HeaderSet:
    """
    Parse the header block of CRLF-normalized message text.

    Only the portion before the first blank line is considered. Within it,
    each line is split on the first ": " occurrence; names and values are
    trimmed. Lines without ": " are silently dropped.

    Args:
        text: Message text with CRLF line endings.

    Returns:
        HeaderSet with the parsed headers.
    """
    header_block, _ = split_message(text)
    headers = HeaderSet()

    for line in header_block.split(CRLF):
        if line == "":
            break
        name, sep, value = line.partition(": ")
        if not sep:
            continue
        headers.add(name.strip(), value.strip())

    return headers


def extract_address(headers: HeaderSet, key: str) -> str:
    """
    Extract a bare address from a header value.

    If the value contains both "<" and ">", the address is the text from
    the last "<" to the last ">" inclusive (brackets kept). Otherwise the
    raw value is returned.

    Args:
        headers: Parsed headers.
        key: Header name (case-insensitive), e.g. "from".

    Returns:
        The address, or "" if the header is absent.

    Example:
        >>> extract_address(parse_headers("From: Name <a@b.com>"), "from")
        '<a@b.com>'
    """
    value = headers.get(key)
    if value is None:
        return ""

    if "<" in value and ">" in value:
        start = value.rfind("<")
        end = value.rfind(">")
        return value[start:end + 1]

    return value


def is_valid_address(address: str) -> bool:
    """
    Permissive address check: must contain both "@" and ".".

    This is only a guard against obviously broken From/To lines before we
    open a network connection, not an RFC 5321 validator.
    """
    return "@" in address and "." in address
