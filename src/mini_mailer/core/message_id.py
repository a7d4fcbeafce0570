# =============================================================================
# Message-ID Generator
# =============================================================================
# Produces Message-ID values of the form:
#
#   <r4nd0mpart.1700000000@hostx.tl>
#
# The local part is 10 random [a-z0-9] characters plus the Unix timestamp.
# The "domain" is a random 5-letter host and 2-letter TLD, never the sender's
# domain or the local hostname (unlike email.utils.make_msgid).
# =============================================================================

import secrets
import string
import time

# Character sets for the random parts
ALPHANUMERIC = string.ascii_lowercase + string.digits
LETTERS = string.ascii_lowercase


def _random_text(alphabet: str, length: int) -> str:
    """Draw `length` characters uniformly from `alphabet` using the CSPRNG."""
    return "".join(secrets.choice(alphabet) for _ in range(length))


def generate_message_id(now: float | None = None) -> str:
    """
    Generate a new Message-ID header value.

    Args:
        now: Unix timestamp to embed. Defaults to the current time.

    Returns:
        Message-ID including the angle brackets, e.g.
        "<k2j4h5g6f7.1700000000@qwert.yu>".
    """
    timestamp = int(time.time() if now is None else now)
    local_part = _random_text(ALPHANUMERIC, 10)
    host = _random_text(LETTERS, 5)
    tld = _random_text(LETTERS, 2)
    return f"<{local_part}.{timestamp}@{host}.{tld}>"
