"""SHA-256 content hashing for chunk bytes."""

import hashlib

from common.constants import HASH_ALGORITHM


def compute_checksum(data: bytes) -> str:
    """
    Compute the content hash for given data.

    Args:
        data: Bytes to compute checksum for

    Returns:
        Hexadecimal string representation of the digest
    """
    return hashlib.new(HASH_ALGORITHM, data).hexdigest()


def verify_checksum(data: bytes, expected: str) -> bool:
    """
    Verify that data matches expected checksum.

    Args:
        data: Bytes to verify
        expected: Expected checksum (hex string)

    Returns:
        True if checksum matches, False otherwise
    """
    return compute_checksum(data) == expected
