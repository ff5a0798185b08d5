"""Store-chunk and merge API routes."""

import base64
import binascii
from typing import Optional

from fastapi import APIRouter, Depends, Query
from starlette.concurrency import run_in_threadpool

from common.exceptions import InvalidInputError
from common.types import ChunkDescriptor
from server.schemas.common import ErrorResponse
from server.schemas.chunks import (
    AggregateManifestModel,
    MergeResponse,
    PartialRecordModel,
    StoreChunkRequest,
    StoreChunkResponse
)
from server.service_locator import get_partial_store
from store.chunk_uploader import ChunkUploader
from store.merge import MergeAggregator
from store.partial_store import PartialStore

router = APIRouter(tags=["Partials"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing or invalid input"},
    500: {"model": ErrorResponse, "description": "Partial store unavailable"},
}


def decode_chunk_payload(payload: str) -> bytes:
    """
    Decode a base64 chunk payload.

    Raises:
        InvalidInputError: If the payload is not valid base64
    """
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidInputError(f"chunk payload is not valid base64: {e}")


@router.post("/upload-chunk", response_model=StoreChunkResponse, responses=ERROR_RESPONSES)
async def upload_chunk(
    request: StoreChunkRequest,
    store: PartialStore = Depends(get_partial_store)
):
    """
    Hash one chunk and store its partial record.

    Parameters:
        - fileId: Opaque file identifier
        - chunkIndex: Zero-based chunk index
        - totalChunks: Chunk count declared by the uploader
        - chunkBytesBase64: Chunk bytes, base64 encoded (chunkBase64 also accepted)

    Returns:
        - ok: true
        - partial: Stored partial record

    Raises:
        - 400: Missing fileId or payload, invalid values
        - 500: Primary and fallback store both failed
    """
    data = decode_chunk_payload(request.chunk_bytes_base64)
    descriptor = ChunkDescriptor(
        index=request.chunk_index,
        byte_start=0,
        byte_end=len(data)
    )

    uploader = ChunkUploader(store)
    record = await run_in_threadpool(
        uploader.upload, request.file_id, descriptor, request.total_chunks, data
    )

    return StoreChunkResponse(partial=PartialRecordModel(**record.to_dict()))


@router.get("/merge-results", response_model=MergeResponse, responses=ERROR_RESPONSES)
async def merge_results(
    file_id: Optional[str] = Query(None, alias="fileId", description="File identifier to merge"),
    store: PartialStore = Depends(get_partial_store)
):
    """
    Merge every stored partial of a file into an ordered manifest.

    Parameters:
        - fileId: File identifier (query string)

    Returns:
        - ok: true
        - aggregate: Manifest with partials ordered by chunkIndex

    Raises:
        - 400: Missing fileId
        - 500: Store listing failed on both backends
    """
    if not file_id:
        raise InvalidInputError("missing fileId")

    aggregator = MergeAggregator(store)
    manifest = await run_in_threadpool(aggregator.merge, file_id)

    return MergeResponse(aggregate=AggregateManifestModel(**manifest.to_dict()))
