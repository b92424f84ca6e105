from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from product_importer.database.connection import get_db
from product_importer.schemas.backup import (
    BackupRunResponse,
    BackupSnapshotResponse,
    ChunkFailureResponse,
)
from product_importer.services.backup_service import list_snapshots, run_backup

router = APIRouter(prefix="/backups", tags=["Backup Snapshots"])


@router.post("/run", response_model=BackupRunResponse)
def trigger_backup(db: Session = Depends(get_db)):
    """Run a snapshot pass now, outside the 09:41 / 23:43 schedule."""
    result = run_backup(db)
    return BackupRunResponse(
        snapshot_count=result.snapshot_count,
        failure_count=result.failure_count,
        failures=[
            ChunkFailureResponse(chunk_index=f.chunk_index, size=f.size, reason=f.reason)
            for f in result.failures
        ],
    )


@router.get("/", response_model=list[BackupSnapshotResponse])
def list_all(db: Session = Depends(get_db)):
    return list_snapshots(db)
