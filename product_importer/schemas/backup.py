from datetime import datetime
from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field


class ChunkFailureResponse(BaseModel):
    chunk_index: int = Field(alias="chunkIndex")
    size: int
    reason: str

    class Config:
        populate_by_name = True


class BackupRunResponse(BaseModel):
    snapshot_count: int = Field(alias="snapshotCount")
    failure_count: int = Field(alias="failureCount")
    failures: List[ChunkFailureResponse] = []

    class Config:
        populate_by_name = True


class BackupSnapshotResponse(BaseModel):
    product_external_id: str
    name_snapshot: str
    price_snapshot: Decimal
    captured_at: datetime

    class Config:
        from_attributes = True
