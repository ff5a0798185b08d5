"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class UploadCommand:
    """Upload a local file in parallel chunks."""

    path: str
    file_id: str | None = None
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class StatusCommand:
    """Show per-chunk state of the last upload."""

    command: Literal["status"] = "status"


@dataclass(frozen=True)
class RetryCommand:
    """Retry one failed chunk."""

    index: int
    command: Literal["retry"] = "retry"


@dataclass(frozen=True)
class RetryFailedCommand:
    """Retry every failed chunk."""

    command: Literal["retry-failed"] = "retry-failed"


@dataclass(frozen=True)
class MergeCommand:
    """Fetch the merged manifest of a file."""

    file_id: str | None = None
    command: Literal["merge"] = "merge"


@dataclass(frozen=True)
class ConfigCommand:
    """Show configuration, or set one key."""

    key: str | None = None
    value: str | None = None
    command: Literal["config"] = "config"


CommandRequest = (
    UploadCommand
    | StatusCommand
    | RetryCommand
    | RetryFailedCommand
    | MergeCommand
    | ConfigCommand
)
