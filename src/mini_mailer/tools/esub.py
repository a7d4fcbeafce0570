# =============================================================================
# esub Tokens
# =============================================================================
# A small proof-of-possession scheme: an esub proves that whoever made it
# knows a shared passphrase, inside a fixed 48-hex-character value that can
# be pasted into a Subject: line.
#
# Construction:
#   key        = Argon2id(passphrase, fixed salt)                 32 bytes
#   nonce      = random                                           12 bytes
#   plaintext  = SHA3-256("text")[:12]                            12 bytes
#   ciphertext = ChaCha20(key, nonce) XOR plaintext               12 bytes
#   token      = hex(nonce || ciphertext)                         48 chars
#
# The plaintext is a public constant, so there is nothing secret inside the
# token. It is not encryption; a verifier with the same passphrase simply
# recomputes the ciphertext for the given nonce and compares.
# =============================================================================

import binascii
import hashlib
import hmac
import secrets

from argon2.low_level import Type, hash_secret_raw
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms

# -----------------------------------------------------------------------------
# Key derivation parameters (Argon2id)
# -----------------------------------------------------------------------------
# These are part of the token format: changing any of them invalidates every
# esub ever generated.
KDF_SALT = b"fixed-salt-1234"       # 15 bytes, shared by all users
KDF_TIME_COST = 3                   # Iterations
KDF_MEMORY_COST = 64 * 1024         # KiB (64 MiB)
KDF_PARALLELISM = 4                 # Lanes
KEY_LENGTH = 32                     # ChaCha20 key size

NONCE_LENGTH = 12
CIPHERTEXT_LENGTH = 12
TOKEN_HEX_LENGTH = 2 * (NONCE_LENGTH + CIPHERTEXT_LENGTH)

# The constant that every token encrypts
PLAINTEXT = hashlib.sha3_256(b"text").digest()[:CIPHERTEXT_LENGTH]


def derive_key(passphrase: str) -> bytes:
    """
    Derive the 32-byte ChaCha20 key from a passphrase with Argon2id.

    Slow: ~64 MiB of memory per call.
    """
    return hash_secret_raw(
        secret=passphrase.encode("utf-8"),
        salt=KDF_SALT,
        time_cost=KDF_TIME_COST,
        memory_cost=KDF_MEMORY_COST,
        parallelism=KDF_PARALLELISM,
        hash_len=KEY_LENGTH,
        type=Type.ID,
    )


def _keystream_xor(key: bytes, nonce: bytes, data: bytes) -> bytes:
    # cryptography takes a 16-byte nonce: 4-byte little-endian block
    # counter followed by the 12-byte RFC 7539 nonce. Counter starts at 0.
    full_nonce = (0).to_bytes(4, "little") + nonce
    encryptor = Cipher(algorithms.ChaCha20(key, full_nonce), mode=None).encryptor()
    return encryptor.update(data) + encryptor.finalize()


def generate(passphrase: str, *, nonce: bytes | None = None, key: bytes | None = None) -> str:
    """
    Generate an esub token for a passphrase.

    Args:
        passphrase: The shared passphrase.
        nonce: 12-byte nonce. Random if not given.
        key: Pre-derived key, to skip the KDF when making several tokens.

    Returns:
        48 lowercase hex characters.
    """
    if nonce is None:
        nonce = secrets.token_bytes(NONCE_LENGTH)
    if len(nonce) != NONCE_LENGTH:
        raise ValueError(f"Nonce must be {NONCE_LENGTH} bytes")

    key = key or derive_key(passphrase)
    ciphertext = _keystream_xor(key, nonce, PLAINTEXT)
    return (nonce + ciphertext).hex()


def decode_token(token: str) -> tuple[bytes, bytes]:
    """
    Split a token into (nonce, ciphertext).

    Raises:
        TokenFormatError: If the token is not exactly 48 hex characters.
    """
    if len(token) != TOKEN_HEX_LENGTH:
        raise TokenFormatError(
            f"Token must be {TOKEN_HEX_LENGTH} hex characters, got {len(token)}"
        )
    try:
        raw = bytes.fromhex(token)
    except (ValueError, binascii.Error) as e:
        raise TokenFormatError(f"Token is not valid hex: {e}") from e

    # fromhex() skips whitespace, so "48 characters" can still be short
    if len(raw) != NONCE_LENGTH + CIPHERTEXT_LENGTH:
        raise TokenFormatError("Token is not valid hex")

    return raw[:NONCE_LENGTH], raw[NONCE_LENGTH:]


def verify(token: str, passphrase: str, *, key: bytes | None = None) -> bool:
    """
    Check whether a token was made with the given passphrase.

    Malformed tokens (wrong length, not hex) simply fail verification;
    the KDF is not run for them.

    Args:
        token: Token to check.
        passphrase: The shared passphrase.
        key: Pre-derived key, to skip the KDF.

    Returns:
        True if the token matches the passphrase.
    """
    try:
        nonce, ciphertext = decode_token(token)
    except TokenFormatError:
        return False

    key = key or derive_key(passphrase)
    expected = _keystream_xor(key, nonce, PLAINTEXT)
    return hmac.compare_digest(expected, ciphertext)


# =============================================================================
# Exceptions
# =============================================================================

class TokenFormatError(ValueError):
    """Raised when a token is not 48 hex characters."""
    pass
