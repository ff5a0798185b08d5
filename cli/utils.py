"""Utility functions for CLI output."""

from collections import Counter
from typing import Dict, List, Optional

from common.types import DONE, ERROR, PENDING, UPLOADING, AggregateManifest, ChunkDescriptor, ChunkState
from cli.constants import GREEN, RED, RESET, YELLOW

STATUS_COLORS = {
    PENDING: "",
    UPLOADING: YELLOW,
    DONE: GREEN,
    ERROR: RED,
}

HASH_PREVIEW_CHARS = 16


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"


def summarize_states(states: List[ChunkState]) -> str:
    """
    One-line count of chunks per status, e.g. "4 chunks: 3 done, 1 error".
    """
    counts = Counter(s.status for s in states)
    parts = [f"{counts[status]} {status}" for status in (DONE, ERROR, UPLOADING, PENDING) if counts[status]]
    noun = "chunk" if len(states) == 1 else "chunks"
    return f"{len(states)} {noun}: " + ", ".join(parts)


def format_chunk_table(
    states: List[ChunkState],
    descriptors: Optional[List[ChunkDescriptor]] = None,
    color: bool = True
) -> str:
    """
    Render per-chunk state as a compact table.

    Args:
        states: Chunk states ordered by index
        descriptors: Planned chunks, used for the size column before a chunk is stored
        color: Whether to wrap statuses in ANSI colors

    Returns:
        Table text, one row per chunk
    """
    if not states:
        return "No upload in progress."

    sizes: Dict[int, int] = {d.index: d.length for d in descriptors or []}
    lines = [f"{'#':>5}  {'STATUS':<10} {'SIZE':>11}  DETAIL"]

    for state in states:
        if state.partial is not None:
            size = format_file_size(state.partial.length)
            detail = state.partial.hash[:HASH_PREVIEW_CHARS]
        else:
            size = format_file_size(sizes[state.index]) if state.index in sizes else "-"
            detail = state.error or ""

        status = f"{state.status:<10}"
        if color and STATUS_COLORS.get(state.status):
            status = f"{STATUS_COLORS[state.status]}{status}{RESET}"
        lines.append(f"{state.index:>5}  {status} {size:>11}  {detail}".rstrip())

    lines.append(summarize_states(states))
    return "\n".join(lines)


def format_manifest(manifest: AggregateManifest) -> str:
    """
    Render an aggregate manifest for display.

    Returns:
        Header line followed by one line per partial in index order
    """
    lines = [f"{manifest.file_id}: {manifest.total_chunks_found} partial(s) found"]
    for partial in manifest.partials:
        lines.append(
            f"  [{partial.chunk_index}/{partial.total_chunks}] {partial.hash} ({format_file_size(partial.length)})"
        )
    return "\n".join(lines)
