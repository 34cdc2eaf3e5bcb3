"""
services/upload_service.py
---------------------------
Stores uploaded media on disk and records it in the uploads table.
"""

import secrets
import time
from pathlib import Path
from typing import Iterable, Optional, Union

from config import UPLOAD_DIR, UPLOAD_MAX_BYTES, UPLOAD_MAX_FILES
from db.connection import DatabasePool
from models.upload import Upload
from repositories.upload_repo import UploadRepository
from security.auth import authorized_only
from services.envelope import NOT_FOUND, VALIDATION, fail, guarded, invalid, ok
from utils.logger import get_logger
from validation import validate_id

logger = get_logger(__name__)

ALLOWED_MIME_TYPES = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    "video/mp4",
    "video/webm",
    "video/ogg",
    "model/gltf+json",
    "model/gltf-binary",
    "application/octet-stream",  # .glb files are often sent untyped
})


# VARCHAR(255) original_name; the extension is carried into the stored filename
MAX_NAME_LENGTH = 255
MAX_EXTENSION_LENGTH = 20


def _stored_name(original_name: str) -> str:
    """Collision-free name: file-<millis>-<random><original extension>."""
    ext = Path(original_name).suffix.lower()
    return f"file-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"


class UploadService:
    """
    Handles media uploads for signed-in users.

    Args:
        db: Open DatabasePool.
        upload_dir: Directory the bytes are written to (default UPLOAD_DIR).
    """

    def __init__(self, db: DatabasePool, upload_dir: Union[str, Path] = UPLOAD_DIR):
        self.repo = UploadRepository(db)
        self.upload_dir = Path(upload_dir)

    def _check(self, original_name: str, mime_type: str, content: bytes) -> Optional[str]:
        if not original_name:
            return "File name is required"
        if len(original_name) > MAX_NAME_LENGTH:
            return f"File name cannot exceed {MAX_NAME_LENGTH} characters"
        if len(Path(original_name).suffix) > MAX_EXTENSION_LENGTH:
            return f"File extension cannot exceed {MAX_EXTENSION_LENGTH} characters"
        if mime_type not in ALLOWED_MIME_TYPES:
            return f"Invalid file type: {mime_type}"
        if not content:
            return "File is empty"
        if len(content) > UPLOAD_MAX_BYTES:
            return f"File too large. Maximum size is {UPLOAD_MAX_BYTES // (1024 * 1024)}MB."
        return None

    def _store(self, claims: dict, original_name: str, mime_type: str, content: bytes) -> Upload:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        filename = _stored_name(original_name)
        path = self.upload_dir / filename
        path.write_bytes(content)

        upload = Upload(
            filename=filename,
            original_name=original_name,
            mime_type=mime_type,
            size=len(content),
            path=str(path),
            uploaded_by=claims.get("user_id"),
        )
        try:
            upload = self.repo.add(upload)
        except Exception:
            path.unlink(missing_ok=True)
            raise
        kind = "image" if upload.is_image() else "media"
        logger.info(f"📁 Stored {kind} '{original_name}' as {filename}")
        return upload

    @guarded("Upload failed")
    @authorized_only()
    def upload(self, claims: dict, original_name: str, mime_type: str, content: bytes) -> dict:
        """
        Store one file.

        Returns:
            Envelope with the upload record (including its public ``url``),
            or a validation failure for a disallowed type or size.
        """
        problem = self._check(original_name, mime_type, content)
        if problem:
            return fail(problem, VALIDATION)
        upload = self._store(claims, original_name, mime_type, content)
        return ok(upload.to_dict(), message="File uploaded successfully")

    @guarded("Upload failed")
    @authorized_only()
    def upload_many(self, claims: dict, files: Iterable[tuple[str, str, bytes]]) -> dict:
        """
        Store several files given as (original_name, mime_type, content).
        Every file is checked before any is written.
        """
        files = list(files)
        if not files:
            return fail("No files uploaded", VALIDATION)
        if len(files) > UPLOAD_MAX_FILES:
            return fail(f"Too many files. Maximum is {UPLOAD_MAX_FILES} files.", VALIDATION)
        for original_name, mime_type, content in files:
            problem = self._check(original_name, mime_type, content)
            if problem:
                return fail(problem, VALIDATION)

        uploads = [self._store(claims, *f) for f in files]
        return ok([u.to_dict() for u in uploads], count=len(uploads), message=f"{len(uploads)} files uploaded successfully")

    @guarded("Failed to fetch uploads")
    @authorized_only()
    def list_uploads(self, claims: dict) -> dict:
        uploads = self.repo.list_all()
        return ok([u.to_dict() for u in uploads], count=len(uploads))

    @guarded("Failed to delete file")
    @authorized_only()
    def delete(self, claims: dict, upload_id) -> dict:
        checked = validate_id(upload_id)
        if not checked.success:
            return invalid(checked.errors, "Invalid ID parameter")
        upload = self.repo.get_by_id(checked.data["id"])
        if upload is None:
            return fail("File not found", NOT_FOUND)

        Path(upload.path).unlink(missing_ok=True)
        self.repo.delete(upload.id)
        logger.info(f"🗑️ User #{claims.get('user_id')} deleted upload #{upload.id}")
        return ok(message="File deleted successfully")
