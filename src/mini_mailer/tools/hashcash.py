# =============================================================================
# Hashcash Stamps
# =============================================================================
# Thin wrapper around the external `hashcash` binary.
#
# We don't implement proof-of-work ourselves; we shell out to:
#
#   hashcash -mb<bits> -z 12 -r <receiver>
#
# and return whatever it prints. The subprocess runs via asyncio so minting
# a high-difficulty stamp doesn't freeze the UI.
# =============================================================================

import asyncio
import logging
import shutil

logger = logging.getLogger(__name__)

# Name of the external program
HASHCASH_BINARY = "hashcash"

# Length of the random field in generated stamps
SALT_CHARS = 12


def build_command(binary: str, bits: int, receiver: str) -> list[str]:
    """Command line for minting a stamp."""
    return [binary, f"-mb{bits}", "-z", str(SALT_CHARS), "-r", receiver]


async def generate_stamp(bits: int | str, receiver: str, *, binary: str = HASHCASH_BINARY) -> str:
    """
    Mint a hashcash stamp.

    Args:
        bits: Difficulty in bits (positive integer, or its string form).
        receiver: Resource string, usually the recipient address.
        binary: Program name or path.

    Returns:
        The stamp, with surrounding whitespace removed.

    Raises:
        HashcashError: If the input is invalid, the binary is missing, or
            the process fails.
    """
    try:
        bits = int(bits)
    except (TypeError, ValueError) as e:
        raise HashcashError(f"Bits must be a number, got {bits!r}") from e
    if bits <= 0:
        raise HashcashError("Bits must be a positive number")
    if not receiver.strip():
        raise HashcashError("Receiver cannot be empty")

    path = shutil.which(binary)
    if path is None:
        raise HashcashError(f"{binary} is not installed")

    command = build_command(path, bits, receiver.strip())
    logger.info(f"Minting {bits}-bit hashcash stamp")

    process = await asyncio.create_subprocess_exec(
        *command,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await process.communicate()

    if process.returncode != 0:
        detail = stderr.decode("utf-8", errors="replace").strip()
        raise HashcashError(
            f"Failed to generate hashcash (exit {process.returncode}): {detail}"
        )

    return stdout.decode("utf-8", errors="replace").strip()


# =============================================================================
# Exceptions
# =============================================================================

class HashcashError(Exception):
    """Raised when a hashcash stamp can't be generated."""
    pass
