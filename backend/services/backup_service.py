"""
Backup export/import for the session list.

Format (schema version 2):
    {
      "schemaVersion": 2,
      "exportedAt": "2024-12-20T10:00:00+00:00",
      "workoutSessions": [...]
    }

Version 1 files predate the session/exercise/set model and are rejected with
a dedicated message. Every validation failure raises BackupValidationError.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from domain.models import CURRENT_BACKUP_SCHEMA_VERSION, WorkoutBackup, WorkoutSession

logger = logging.getLogger(__name__)

LEGACY_BACKUP_SCHEMA_VERSION = 1


class BackupValidationError(ValueError):
    """A backup file failed validation. The message is shown to the user."""


def create_workout_backup(
    sessions: Iterable[WorkoutSession],
    exported_at: Optional[str] = None,
) -> WorkoutBackup:
    """Wrap sessions in a current-version backup envelope."""
    return WorkoutBackup(
        schema_version=CURRENT_BACKUP_SCHEMA_VERSION,
        exported_at=exported_at or datetime.now(timezone.utc).isoformat(),
        workout_sessions=list(sessions),
    )


def stringify_workout_backup(backup: WorkoutBackup) -> str:
    """Serialize a backup as indented JSON with wire (camelCase) field names."""
    return json.dumps(
        backup.model_dump(by_alias=True, mode="json", exclude_none=True),
        indent=2,
        ensure_ascii=False,
    )


def _first_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error.get("loc", ()))
    return f"{location}: {error.get('msg')}" if location else error.get("msg", "invalid value")


def validate_backup_data(data: Any) -> WorkoutBackup:
    """
    Validate a decoded backup object.

    Raises:
        BackupValidationError: With a message naming the first problem found
    """
    if not isinstance(data, dict):
        raise BackupValidationError("Backup file must be a JSON object")

    version = data.get("schemaVersion")
    if version is None or isinstance(version, bool) or not isinstance(version, int):
        raise BackupValidationError('Backup file missing or invalid "schemaVersion" field')

    if version == LEGACY_BACKUP_SCHEMA_VERSION:
        raise BackupValidationError(
            "Legacy backup version 1 not supported. Export a new backup from the current app version."
        )
    if version != CURRENT_BACKUP_SCHEMA_VERSION:
        raise BackupValidationError(
            f"Unsupported backup schema version: {version}. Expected version {CURRENT_BACKUP_SCHEMA_VERSION}."
        )

    exported_at = data.get("exportedAt")
    if not exported_at or not isinstance(exported_at, str):
        raise BackupValidationError('Backup file missing or invalid "exportedAt" field')

    raw_sessions = data.get("workoutSessions")
    if not isinstance(raw_sessions, list):
        raise BackupValidationError('Backup file must contain "workoutSessions" as an array')

    sessions = []
    for index, raw in enumerate(raw_sessions):
        if not isinstance(raw, dict):
            raise BackupValidationError(f"Session at index {index} must be an object")
        if not raw.get("performedOn") or not isinstance(raw.get("performedOn"), str):
            raise BackupValidationError(
                f'Session at index {index} is invalid for schema version 2: missing "performedOn"'
            )
        try:
            sessions.append(WorkoutSession.model_validate(raw))
        except ValidationError as e:
            raise BackupValidationError(
                f"Session at index {index} is invalid for schema version 2: {_first_error(e)}"
            ) from e

    return WorkoutBackup(
        schema_version=version,
        exported_at=exported_at,
        workout_sessions=sessions,
    )


def parse_workout_backup(text: str) -> WorkoutBackup:
    """
    Parse and validate backup JSON text.

    Raises:
        BackupValidationError: On malformed JSON or an invalid backup
    """
    try:
        data = json.loads(text)
    except ValueError as e:
        raise BackupValidationError(f"Invalid JSON format: {e}") from e

    try:
        backup = validate_backup_data(data)
    except BackupValidationError as e:
        logger.warning(f"Backup rejected: {e}")
        raise

    logger.info(f"Backup parsed with {len(backup.workout_sessions)} sessions")
    return backup
