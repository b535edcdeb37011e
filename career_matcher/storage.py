"""Temporary on-disk storage for uploaded CV files."""

from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

_LOGGER = logging.getLogger(__name__)


def ensure_directory(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def save_upload(storage: FileStorage, upload_folder: Path) -> str:
    """Persist an upload under a unique name, keeping its extension."""
    original = secure_filename(storage.filename or "")
    extension = Path(original).suffix.lower()
    target = ensure_directory(upload_folder) / f"cv-{uuid.uuid4().hex}{extension}"
    storage.save(str(target))
    return str(target)


def delete_upload(file_path: str) -> None:
    """Remove a temporary upload; a file that is already gone is not an error."""
    try:
        os.unlink(file_path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        _LOGGER.error("Error deleting file %s: %s", file_path, exc)
