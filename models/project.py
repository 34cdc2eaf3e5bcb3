"""
models/project.py
-----------------
Domain models for portfolio projects and their gallery images, plus the
explicit partial-update struct used by the update path.
"""

from dataclasses import asdict, dataclass, field, fields
from datetime import date, datetime
from typing import Any, Mapping, Optional


def _iso(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def _string_list(value: Any) -> list[str]:
    """JSONB columns come back as lists; tolerate NULL from pre-migration rows."""
    return list(value) if value else []


@dataclass
class Project:
    """
    Represents a single portfolio entry.

    Attributes:
        slug: Unique URL identifier (lowercase letters, digits, hyphens).
        category: One of web, mobile, 3d, animation, illustration, game, other.
        technologies: Ordered list of technology names.
        tags: Distinct tag names, in first-seen order.
        featured_order / project_order: Display ranks, lower first.
    """
    title: str
    slug: str
    description: str
    category: str
    short_description: Optional[str] = None
    technologies: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    client: Optional[str] = None
    client_url: Optional[str] = None
    project_url: Optional[str] = None
    github_url: Optional[str] = None
    demo_url: Optional[str] = None
    image_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    video_url: Optional[str] = None
    model_url: Optional[str] = None
    featured: bool = False
    published: bool = True
    featured_order: int = 0
    project_order: int = 0
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Project":
        """Build a Project from a dict-style database row."""
        names = {f.name for f in fields(cls)}
        project = cls(**{k: v for k, v in row.items() if k in names})
        project.technologies = _string_list(project.technologies)
        project.tags = _string_list(project.tags)
        return project

    def to_dict(self) -> dict:
        return {key: _iso(value) for key, value in asdict(self).items()}


@dataclass
class ProjectImage:
    """A gallery image attached to a project."""
    project_id: int
    url: str
    caption: Optional[str] = None
    sort_order: int = 0
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ProjectImage":
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in row.items() if k in names})

    def to_dict(self) -> dict:
        return {key: _iso(value) for key, value in asdict(self).items()}


class _Unset:
    """Marker for "leave this column as it is"."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


@dataclass
class ProjectUpdate:
    """
    A partial update to a project.

    Every field is either ``UNSET`` (no change) or a new value. ``None`` is
    a real value meaning "clear this column", so an omitted field and an
    explicitly cleared one never look alike.
    """
    title: Any = UNSET
    slug: Any = UNSET
    description: Any = UNSET
    short_description: Any = UNSET
    category: Any = UNSET
    technologies: Any = UNSET
    tags: Any = UNSET
    client: Any = UNSET
    client_url: Any = UNSET
    project_url: Any = UNSET
    github_url: Any = UNSET
    demo_url: Any = UNSET
    image_url: Any = UNSET
    thumbnail_url: Any = UNSET
    video_url: Any = UNSET
    model_url: Any = UNSET
    featured: Any = UNSET
    published: Any = UNSET
    featured_order: Any = UNSET
    project_order: Any = UNSET
    start_date: Any = UNSET
    end_date: Any = UNSET

    @classmethod
    def columns(cls) -> tuple[str, ...]:
        """Names of every column an update may touch."""
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProjectUpdate":
        """Take the keys present in ``data``; everything else stays UNSET."""
        return cls(**{name: data[name] for name in cls.columns() if name in data})

    def changes(self) -> dict[str, Any]:
        """Only the fields that were explicitly set, in column order."""
        return {
            name: getattr(self, name)
            for name in self.columns()
            if getattr(self, name) is not UNSET
        }

    def is_empty(self) -> bool:
        return not self.changes()
