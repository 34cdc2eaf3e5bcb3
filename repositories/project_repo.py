"""
repositories/project_repo.py
----------------------------
Data access layer for portfolio projects and their gallery images.
All SQL queries related to the `projects` and `project_images` tables live here.
"""

from typing import Any, Optional

from psycopg2.extras import Json

from db.connection import DatabasePool
from models.project import Project, ProjectImage, ProjectUpdate
from utils.logger import get_logger

logger = get_logger(__name__)

INSERT_COLUMNS = (
    "title", "slug", "description", "short_description", "category",
    "technologies", "tags", "client", "client_url", "project_url",
    "github_url", "demo_url", "image_url", "thumbnail_url", "video_url",
    "model_url", "featured", "published", "featured_order", "project_order",
    "start_date", "end_date",
)

_JSON_COLUMNS = {"technologies", "tags"}

LISTING_ORDER = "featured_order ASC, project_order ASC, created_at DESC, id DESC"


def _bind(column: str, value: Any) -> Any:
    """Adapt a Python value for its column (JSONB columns need wrapping)."""
    if column in _JSON_COLUMNS and value is not None:
        return Json(list(value))
    return value


class ProjectRepository:
    """Repository for CRUD operations on the projects table."""

    def __init__(self, db: DatabasePool):
        self.db = db

    # ── CREATE ────────────────────────────────────────────

    def add(self, values: dict) -> Project:
        """
        Insert a new project.

        The unique index on ``slug`` rejects duplicates atomically; the
        resulting ``psycopg2.errors.UniqueViolation`` propagates.

        Args:
            values: Validated project fields keyed by column name.

        Returns:
            The stored Project with id and timestamps populated.
        """
        columns = [c for c in INSERT_COLUMNS if c in values]
        sql = (
            f"INSERT INTO projects ({', '.join(columns)}) "
            f"VALUES ({', '.join(['%s'] * len(columns))}) RETURNING *;"
        )
        params = [_bind(c, values[c]) for c in columns]
        with self.db.cursor(commit=True) as cur:
            cur.execute(sql, params)
            project = Project.from_row(cur.fetchone())
        logger.info(f"Created project #{project.id} '{project.slug}'")
        return project

    # ── READ ──────────────────────────────────────────────

    def get_by_id(self, project_id: int, published_only: bool = True) -> Optional[Project]:
        sql = "SELECT * FROM projects WHERE id = %s"
        if published_only:
            sql += " AND published = TRUE"
        with self.db.cursor() as cur:
            cur.execute(sql + ";", (project_id,))
            row = cur.fetchone()
        return Project.from_row(row) if row else None

    def get_by_slug(self, slug: str, published_only: bool = True) -> Optional[Project]:
        sql = "SELECT * FROM projects WHERE slug = %s"
        if published_only:
            sql += " AND published = TRUE"
        with self.db.cursor() as cur:
            cur.execute(sql + ";", (slug,))
            row = cur.fetchone()
        return Project.from_row(row) if row else None

    def find(
        self,
        limit: int,
        offset: int = 0,
        categories: Optional[list[str]] = None,
        featured: Optional[bool] = None,
        published: Optional[bool] = None,
    ) -> list[Project]:
        """
        Fetch a page of projects.

        Args:
            limit: Page size.
            offset: Rows to skip.
            categories: Keep only these categories (any of).
            featured: Filter on the featured flag when not None.
            published: Filter on the published flag when not None.

        Returns:
            Projects ordered by featured rank, display rank, then newest.
        """
        sql = "SELECT * FROM projects WHERE 1=1"
        params: list = []
        if categories:
            sql += " AND category = ANY(%s)"
            params.append(list(categories))
        if featured is not None:
            sql += " AND featured = %s"
            params.append(featured)
        if published is not None:
            sql += " AND published = %s"
            params.append(published)
        sql += f" ORDER BY {LISTING_ORDER} LIMIT %s OFFSET %s;"
        params.extend([limit, offset])

        with self.db.cursor() as cur:
            cur.execute(sql, params)
            return [Project.from_row(r) for r in cur.fetchall()]

    def featured(self, limit: int) -> list[Project]:
        """Published featured projects, via the `get_featured_projects` routine."""
        with self.db.cursor() as cur:
            cur.callproc("get_featured_projects", (limit,))
            return [Project.from_row(r) for r in cur.fetchall()]

    def by_category(self, category: str, limit: int, offset: int = 0) -> list[Project]:
        with self.db.cursor() as cur:
            cur.callproc("get_projects_by_category", (category, limit, offset))
            return [Project.from_row(r) for r in cur.fetchall()]

    def search(
        self,
        term: str,
        limit: int,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
    ) -> list[Project]:
        """Case-insensitive search over text, technologies and tags (`search_projects` routine)."""
        with self.db.cursor() as cur:
            cur.callproc("search_projects", (term, limit, category, featured))
            return [Project.from_row(r) for r in cur.fetchall()]

    def stats(self) -> dict:
        """
        Counts computed by the `get_project_stats` routine.

        Returns:
            Dict with 'total_projects', 'published_projects',
            'featured_projects' and 'by_category' ({category: count}).
        """
        with self.db.cursor() as cur:
            cur.callproc("get_project_stats", ())
            row = cur.fetchone()
        if not row:
            return {"total_projects": 0, "published_projects": 0, "featured_projects": 0, "by_category": {}}
        return {
            "total_projects": int(row["total_projects"]),
            "published_projects": int(row["published_projects"]),
            "featured_projects": int(row["featured_projects"]),
            "by_category": {k: int(v) for k, v in (row["by_category"] or {}).items()},
        }

    # ── UPDATE ────────────────────────────────────────────

    def update(self, project_id: int, update: ProjectUpdate) -> Optional[Project]:
        """
        Apply a partial update; only the fields set on ``update`` change.

        Returns:
            The updated Project, or None if no row has that id. The
            `updated_at` trigger stamps the change time.
        """
        changes = update.changes()
        if not changes:
            return self.get_by_id(project_id, published_only=False)
        assignments = ", ".join(f"{column} = %s" for column in changes)
        sql = f"UPDATE projects SET {assignments} WHERE id = %s RETURNING *;"
        params = [_bind(c, v) for c, v in changes.items()] + [project_id]

        with self.db.cursor(commit=True) as cur:
            cur.execute(sql, params)
            row = cur.fetchone()
        if row:
            logger.info(f"Updated project #{project_id}: {', '.join(changes)}")
        return Project.from_row(row) if row else None

    # ── DELETE ────────────────────────────────────────────

    def delete(self, project_id: int) -> bool:
        """
        Delete a project (its images go with it).

        Returns:
            True if a row was deleted, False otherwise.
        """
        with self.db.cursor(commit=True) as cur:
            cur.execute("DELETE FROM projects WHERE id = %s;", (project_id,))
            deleted = cur.rowcount > 0
        if deleted:
            logger.info(f"Deleted project #{project_id}")
        return deleted


class ProjectImageRepository:
    """Repository for the project_images sub-table."""

    def __init__(self, db: DatabasePool):
        self.db = db

    def add(self, image: ProjectImage) -> ProjectImage:
        """
        Attach an image to a project. A missing project raises
        ``psycopg2.errors.ForeignKeyViolation``.
        """
        sql = """
            INSERT INTO project_images (project_id, url, caption, sort_order)
            VALUES (%s, %s, %s, %s)
            RETURNING id, created_at;
        """
        with self.db.cursor(commit=True) as cur:
            cur.execute(sql, (image.project_id, image.url, image.caption, image.sort_order))
            row = cur.fetchone()
        image.id = row["id"]
        image.created_at = row["created_at"]
        logger.info(f"Added image #{image.id} to project #{image.project_id}")
        return image

    def list_for_project(self, project_id: int) -> list[ProjectImage]:
        sql = "SELECT * FROM project_images WHERE project_id = %s ORDER BY sort_order ASC, id ASC;"
        with self.db.cursor() as cur:
            cur.execute(sql, (project_id,))
            return [ProjectImage.from_row(r) for r in cur.fetchall()]

    def delete(self, image_id: int) -> bool:
        with self.db.cursor(commit=True) as cur:
            cur.execute("DELETE FROM project_images WHERE id = %s;", (image_id,))
            return cur.rowcount > 0
