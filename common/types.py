"""Shared data type definitions (ChunkDescriptor, ChunkState, PartialRecord, AggregateManifest)."""

import json
import time
from dataclasses import dataclass, replace
from typing import List, Literal, Optional

from common.exceptions import PartialParseError

ChunkStatus = Literal["pending", "uploading", "done", "error"]

PENDING: ChunkStatus = "pending"
UPLOADING: ChunkStatus = "uploading"
DONE: ChunkStatus = "done"
ERROR: ChunkStatus = "error"

TERMINAL_STATUSES = frozenset({DONE, ERROR})


def now_ms() -> int:
    """
    Get current time as milliseconds since the Unix epoch.

    Returns:
        Integer timestamp in milliseconds
    """
    return int(time.time() * 1000)


@dataclass(frozen=True)
class ChunkDescriptor:
    """
    Byte range of one planned chunk: [byte_start, byte_end).
    """
    index: int
    byte_start: int
    byte_end: int

    @property
    def length(self) -> int:
        return self.byte_end - self.byte_start


@dataclass(frozen=True)
class PartialRecord:
    """
    Durable metadata describing one stored chunk.

    Identity is the pair (file_id, chunk_index); total_chunks is whatever the
    uploader declared and is not checked by the store.
    """
    file_id: str
    chunk_index: int
    total_chunks: int
    hash: str
    length: int
    stored_at: int

    def to_dict(self) -> dict:
        """
        Convert to the camelCase wire/storage representation.

        Returns:
            Dictionary with fileId, chunkIndex, totalChunks, hash, length, storedAt
        """
        return {
            "fileId": self.file_id,
            "chunkIndex": self.chunk_index,
            "totalChunks": self.total_chunks,
            "hash": self.hash,
            "length": self.length,
            "storedAt": self.stored_at,
        }

    def to_json(self) -> bytes:
        return json.dumps(self.to_dict()).encode("utf-8")

    @classmethod
    def from_dict(cls, data: dict) -> "PartialRecord":
        """
        Build a record from its wire/storage representation.

        Args:
            data: Dictionary as produced by to_dict

        Returns:
            PartialRecord instance

        Raises:
            PartialParseError: If fields are missing or have the wrong type
        """
        if not isinstance(data, dict):
            raise PartialParseError(f"Partial record must be an object, got {type(data).__name__}")
        try:
            record = cls(
                file_id=data["fileId"],
                chunk_index=data["chunkIndex"],
                total_chunks=data["totalChunks"],
                hash=data["hash"],
                length=data["length"],
                stored_at=data["storedAt"],
            )
        except KeyError as e:
            raise PartialParseError(f"Partial record missing field {e}") from e

        for name in ("chunk_index", "total_chunks", "length", "stored_at"):
            value = getattr(record, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise PartialParseError(f"Partial record field {name} must be an integer")
        if not isinstance(record.file_id, str) or not isinstance(record.hash, str):
            raise PartialParseError("Partial record fileId and hash must be strings")
        return record

    @classmethod
    def from_json(cls, body: bytes) -> "PartialRecord":
        """
        Decode a stored JSON body.

        Raises:
            PartialParseError: If the body is not valid JSON or not a record
        """
        try:
            data = json.loads(body)
        except (ValueError, UnicodeDecodeError) as e:
            raise PartialParseError(f"Partial record is not valid JSON: {e}") from e
        return cls.from_dict(data)


@dataclass(frozen=True)
class AggregateManifest:
    """
    Merged, index-ordered view of every partial record found for a file.
    Derived on each merge request, never stored.
    """
    file_id: str
    total_chunks_found: int
    hashes: List[str]
    partials: List[PartialRecord]
    generated_at: int

    def to_dict(self) -> dict:
        return {
            "fileId": self.file_id,
            "totalChunksFound": self.total_chunks_found,
            "hashes": list(self.hashes),
            "partials": [p.to_dict() for p in self.partials],
            "generatedAt": self.generated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AggregateManifest":
        partials = [PartialRecord.from_dict(p) for p in data.get("partials", [])]
        return cls(
            file_id=data["fileId"],
            total_chunks_found=data["totalChunksFound"],
            hashes=list(data.get("hashes", [])),
            partials=partials,
            generated_at=data["generatedAt"],
        )


@dataclass(frozen=True)
class ChunkState:
    """
    Lifecycle state of one chunk within an upload session.

    Instances are immutable; a transition publishes a new instance so a reader
    never observes a mix of two states.
    """
    index: int
    status: ChunkStatus = PENDING
    partial: Optional[PartialRecord] = None
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def to_pending(self) -> "ChunkState":
        return replace(self, status=PENDING, partial=None, error=None)

    def to_uploading(self) -> "ChunkState":
        return replace(self, status=UPLOADING, error=None)

    def to_done(self, partial: PartialRecord) -> "ChunkState":
        return replace(self, status=DONE, partial=partial, error=None)

    def to_error(self, message: str) -> "ChunkState":
        return replace(self, status=ERROR, partial=None, error=message)
