"""
repositories/upload_repo.py
---------------------------
Data access layer for upload metadata.
All SQL queries related to the `uploads` table live here.
"""

from typing import Optional

from db.connection import DatabasePool
from models.upload import Upload
from utils.logger import get_logger

logger = get_logger(__name__)


class UploadRepository:
    """Repository for CRUD operations on the uploads table."""

    def __init__(self, db: DatabasePool):
        self.db = db

    def add(self, upload: Upload) -> Upload:
        """
        Record an already-written file.

        Returns:
            The same Upload with its `id` and `created_at` populated.
        """
        sql = """
            INSERT INTO uploads (filename, original_name, mime_type, size, path, uploaded_by)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING id, created_at;
        """
        with self.db.cursor(commit=True) as cur:
            cur.execute(sql, (
                upload.filename, upload.original_name, upload.mime_type,
                upload.size, upload.path, upload.uploaded_by,
            ))
            row = cur.fetchone()
        upload.id = row["id"]
        upload.created_at = row["created_at"]
        logger.info(f"Recorded upload #{upload.id} '{upload.filename}' ({upload.size} bytes)")
        return upload

    def get_by_id(self, upload_id: int) -> Optional[Upload]:
        with self.db.cursor() as cur:
            cur.execute("SELECT * FROM uploads WHERE id = %s;", (upload_id,))
            row = cur.fetchone()
        return Upload.from_row(row) if row else None

    def list_all(self) -> list[Upload]:
        with self.db.cursor() as cur:
            cur.execute("SELECT * FROM uploads ORDER BY created_at DESC, id DESC;")
            return [Upload.from_row(r) for r in cur.fetchall()]

    def delete(self, upload_id: int) -> bool:
        with self.db.cursor(commit=True) as cur:
            cur.execute("DELETE FROM uploads WHERE id = %s;", (upload_id,))
            deleted = cur.rowcount > 0
        if deleted:
            logger.info(f"Deleted upload record #{upload_id}")
        return deleted
