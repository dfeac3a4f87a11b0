"""
Backup router: export sessions to the versioned envelope and import it back.
"""

import logging

from fastapi import APIRouter, HTTPException

from api.schemas import BackupExportRequest, BackupImportRequest
from backend.services.backup_service import (
    BackupValidationError,
    create_workout_backup,
    parse_workout_backup,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/backup",
    tags=["Backup"],
)


@router.post("/export")
def export_backup(request: BackupExportRequest):
    """Wrap sessions in a current-version backup envelope."""
    backup = create_workout_backup(request.sessions)
    return backup.model_dump(by_alias=True, mode="json", exclude_none=True)


@router.post("/import")
def import_backup(request: BackupImportRequest):
    """
    Validate backup file contents.

    Raises:
        HTTPException: 422 with the validation message for invalid backups
    """
    try:
        backup = parse_workout_backup(request.backup_text)
    except BackupValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return backup.model_dump(by_alias=True, mode="json", exclude_none=True)
