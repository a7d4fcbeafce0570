# =============================================================================
# Composer Tools
# =============================================================================
# Helpers reachable from the Tools menu:
#   - esub: Passphrase proof-of-possession tokens
#   - hashcash: Proof-of-work stamps via the external hashcash binary
#   - mime_subject: RFC 2047 Subject: encoding
# =============================================================================

from mini_mailer.tools import esub
from mini_mailer.tools.esub import TokenFormatError
from mini_mailer.tools.hashcash import HashcashError, generate_stamp
from mini_mailer.tools.mime_subject import encode_subject

__all__ = [
    "esub",
    "TokenFormatError",
    "generate_stamp",
    "HashcashError",
    "encode_subject",
]
