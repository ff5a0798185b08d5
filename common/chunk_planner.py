"""Splits a file's byte length into an ordered list of chunk descriptors."""

from typing import List

from common.types import ChunkDescriptor


def plan(file_size: int, chunk_size: int) -> List[ChunkDescriptor]:
    """
    Plan fixed-size chunks covering [0, file_size).

    The descriptors tile the range contiguously; only the last one may be
    shorter than chunk_size. An empty file still yields a single empty chunk
    so that it makes one round-trip through the store.

    Args:
        file_size: Total byte length of the file (>= 0)
        chunk_size: Maximum bytes per chunk (> 0)

    Returns:
        Descriptors ordered by index

    Raises:
        ValueError: If file_size is negative or chunk_size is not positive
    """
    if file_size < 0:
        raise ValueError(f"file_size must be non-negative, got {file_size}")
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    total = max(1, -(-file_size // chunk_size))
    descriptors = []
    for index in range(total):
        start = index * chunk_size
        end = min(start + chunk_size, file_size)
        descriptors.append(ChunkDescriptor(index=index, byte_start=start, byte_end=end))
    return descriptors
