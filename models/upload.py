"""
models/upload.py
----------------
Domain model for uploaded files. The bytes live on disk; the row only
records where.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from config import UPLOAD_URL_PREFIX


@dataclass
class Upload:
    """
    Attributes:
        filename: Unique name the file was stored under.
        original_name: Name supplied by the uploader.
        path: Filesystem location of the stored file.
        uploaded_by: Owning user id; NULL once that user is deleted.
    """
    filename: str
    original_name: str
    mime_type: str
    size: int
    path: str
    uploaded_by: Optional[int] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Upload":
        return cls(
            id=row.get("id"),
            filename=row["filename"],
            original_name=row["original_name"],
            mime_type=row["mime_type"],
            size=row["size"],
            path=row["path"],
            uploaded_by=row.get("uploaded_by"),
            created_at=row.get("created_at"),
        )

    @property
    def url(self) -> str:
        return f"{UPLOAD_URL_PREFIX.rstrip('/')}/{self.filename}"

    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "filename": self.filename,
            "original_name": self.original_name,
            "mime_type": self.mime_type,
            "size": self.size,
            "url": self.url,
            "uploaded_by": self.uploaded_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
