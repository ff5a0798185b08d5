"""Chunk sender contract used by the upload orchestrator."""

from typing import Protocol

from common.types import ChunkDescriptor, PartialRecord
from store.chunk_uploader import ChunkUploader


class ChunkSender(Protocol):
    """
    Delivers one chunk to the partial store and returns its stored record.

    Implementations raise on failure (StoreUnavailableError, TransportError);
    they never retry a store rejection themselves.
    """

    def store_chunk(
        self,
        file_id: str,
        descriptor: ChunkDescriptor,
        total_chunks: int,
        data: bytes
    ) -> PartialRecord:
        ...


class DirectChunkSender:
    """Sends chunks straight to an in-process ChunkUploader."""

    def __init__(self, uploader: ChunkUploader):
        self.uploader = uploader

    def store_chunk(
        self,
        file_id: str,
        descriptor: ChunkDescriptor,
        total_chunks: int,
        data: bytes
    ) -> PartialRecord:
        return self.uploader.upload(file_id, descriptor, total_chunks, data)
