"""Pydantic schemas for the store-chunk and merge endpoints."""

from typing import List

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class PartialRecordModel(BaseModel):
    """Wire form of a stored partial record."""
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(alias="fileId")
    chunk_index: int = Field(alias="chunkIndex")
    total_chunks: int = Field(alias="totalChunks")
    hash: str
    length: int
    stored_at: int = Field(alias="storedAt")


class StoreChunkRequest(BaseModel):
    """Request model for storing one chunk. An empty payload is a zero-length chunk."""
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(alias="fileId", min_length=1)
    chunk_index: int = Field(alias="chunkIndex", ge=0)
    total_chunks: int = Field(alias="totalChunks", ge=1)
    chunk_bytes_base64: str = Field(
        alias="chunkBytesBase64",
        validation_alias=AliasChoices("chunkBytesBase64", "chunkBase64", "chunk_bytes_base64"),
    )


class StoreChunkResponse(BaseModel):
    """Response model for a stored chunk."""
    ok: bool = True
    partial: PartialRecordModel


class AggregateManifestModel(BaseModel):
    """Wire form of the merged manifest."""
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(alias="fileId")
    total_chunks_found: int = Field(alias="totalChunksFound")
    hashes: List[str]
    partials: List[PartialRecordModel]
    generated_at: int = Field(alias="generatedAt")


class MergeResponse(BaseModel):
    """Response model for the merge operation."""
    ok: bool = True
    aggregate: AggregateManifestModel
