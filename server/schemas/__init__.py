"""Pydantic schemas for API requests and responses."""

from server.schemas.chunks import (
    AggregateManifestModel,
    MergeResponse,
    PartialRecordModel,
    StoreChunkRequest,
    StoreChunkResponse
)
from server.schemas.common import ErrorResponse

__all__ = [
    "AggregateManifestModel",
    "MergeResponse",
    "PartialRecordModel",
    "StoreChunkRequest",
    "StoreChunkResponse",
    "ErrorResponse"
]
