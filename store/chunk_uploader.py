"""Hashes one chunk and persists its partial record."""

import logging

from common.checksum import compute_checksum
from common.exceptions import InvalidInputError
from common.types import ChunkDescriptor, PartialRecord, now_ms
from store.keys import partial_key
from store.partial_store import PartialStore

logger = logging.getLogger(__name__)


class ChunkUploader:
    """
    Builds a PartialRecord for a chunk and writes it to the PartialStore.

    Exactly one store write per call. Store failures propagate as
    StoreUnavailableError; retrying is left to the caller.
    """

    def __init__(self, store: PartialStore):
        self.store = store

    def upload(
        self,
        file_id: str,
        descriptor: ChunkDescriptor,
        total_chunks: int,
        data: bytes
    ) -> PartialRecord:
        """
        Hash chunk bytes and store the resulting partial record.

        Args:
            file_id: Opaque caller-supplied file identifier
            descriptor: Chunk being uploaded
            total_chunks: Chunk count declared by the uploader
            data: Chunk bytes

        Returns:
            The stored PartialRecord

        Raises:
            InvalidInputError: If file_id is empty or the indices are out of range
            StoreUnavailableError: If the store rejected the write
        """
        if not file_id:
            raise InvalidInputError("missing fileId")
        if descriptor.index < 0:
            raise InvalidInputError(f"chunkIndex must be >= 0, got {descriptor.index}")
        if total_chunks < 1:
            raise InvalidInputError(f"totalChunks must be >= 1, got {total_chunks}")

        record = PartialRecord(
            file_id=file_id,
            chunk_index=descriptor.index,
            total_chunks=total_chunks,
            hash=compute_checksum(data),
            length=len(data),
            stored_at=now_ms(),
        )

        key = partial_key(file_id, descriptor.index)
        backend = self.store.put(key, record)
        logger.info(f"Stored chunk {descriptor.index}/{total_chunks} of {file_id} via {backend} ({len(data)} bytes)")
        return record
