# =============================================================================
# MIME Subject Encoder
# =============================================================================
# Encodes a non-ASCII subject as RFC 2047 "B" encoded-words so it can be
# pasted straight into a raw Subject: header line.
#
# Each encoded-word is at most 75 characters on its own; the "Subject: "
# prefix is not counted. Long subjects become several words, one per line,
# each continuation line starting with a space (header folding). Words
# never split a UTF-8 character.
# =============================================================================

import base64

CHARSET = "UTF-8"

# RFC 2047 section 2
MAX_ENCODED_WORD_LEN = 75

WORD_PREFIX = f"=?{CHARSET}?b?"
WORD_SUFFIX = "?="

# Room left for base64 text, and the raw bytes that fit in it (45)
MAX_BASE64_LEN = MAX_ENCODED_WORD_LEN - len(WORD_PREFIX) - len(WORD_SUFFIX)
MAX_CHUNK_BYTES = MAX_BASE64_LEN // 4 * 3

FOLD = "\n "


def needs_encoding(text: str) -> bool:
    """True if the text contains anything besides printable ASCII and tabs."""
    return any(
        (char < " " or char > "~") and char != "\t"
        for char in text
    )


def split_utf8(text: str) -> list[bytes]:
    """Split text into UTF-8 chunks of at most MAX_CHUNK_BYTES each."""
    chunks = []
    current = b""
    for char in text:
        encoded = char.encode("utf-8")
        if current and len(current) + len(encoded) > MAX_CHUNK_BYTES:
            chunks.append(current)
            current = b""
        current += encoded
    chunks.append(current)
    return chunks


def encode_word(chunk: bytes) -> str:
    return WORD_PREFIX + base64.b64encode(chunk).decode("ascii") + WORD_SUFFIX


def encode_subject(text: str) -> str:
    """
    Encode a subject line for a raw header.

    Args:
        text: The subject as typed.

    Returns:
        "" for empty input, the text unchanged if it is plain ASCII,
        otherwise one or more "=?UTF-8?b?...?=" words joined by "\\n ".
    """
    if not text:
        return ""
    if not needs_encoding(text):
        return text

    return FOLD.join(encode_word(chunk) for chunk in split_utf8(text))
