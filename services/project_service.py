"""
services/project_service.py
----------------------------
Operations on portfolio projects.
Sanitizes and validates input, calls the ProjectRepository, and wraps every
outcome in a result envelope.
"""

from typing import Any, Mapping, Optional

from psycopg2 import errors as pg_errors

from config import CATEGORY_DEFAULT_LIMIT, FEATURED_DEFAULT_LIMIT, MAX_PAGE_SIZE, SEARCH_MAX_LIMIT
from db.connection import DatabasePool
from models.project import ProjectImage, ProjectUpdate
from repositories.project_repo import ProjectImageRepository, ProjectRepository
from services.envelope import CONFLICT, NOT_FOUND, VALIDATION, fail, guarded, invalid, ok
from utils.logger import get_logger
from validation import sanitize_text, validate, validate_id
from validation.schemas import (
    CATEGORY_LISTING,
    PROJECT_CREATE,
    PROJECT_FILTER,
    PROJECT_IMAGE,
    PROJECT_UPDATE,
    SEARCH,
    SLUG,
)
from validation.rules import Integer

logger = get_logger(__name__)

SLUG_TAKEN = "Project with this slug already exists"
PROJECT_NOT_FOUND = "Project not found"


def _page(projects: list, limit: int, offset: int, **extra) -> dict:
    return ok(
        [p.to_dict() for p in projects],
        count=len(projects),
        pagination={"limit": limit, "offset": offset, "has_more": len(projects) == limit},
        **extra,
    )


class ProjectService:
    """
    Handles all business logic related to portfolio projects.

    Every method returns an envelope and never raises; see services.envelope.
    """

    def __init__(self, db: DatabasePool):
        self.repo = ProjectRepository(db)
        self.images = ProjectImageRepository(db)

    # ── Listing & lookup ──────────────────────────────────

    @guarded("Failed to fetch projects")
    def list_projects(self, params: Optional[Mapping[str, Any]] = None) -> dict:
        """
        List projects with optional filters.

        Args:
            params: Query parameters: limit, offset (or page), category
                (list or comma-separated), featured, published.

        Returns:
            Envelope with the page in ``data`` plus ``count`` and ``pagination``.
        """
        result = validate(PROJECT_FILTER, params)
        if not result.success:
            return invalid(result.errors, "Invalid query parameters")
        query = result.data

        limit = min(query["limit"], MAX_PAGE_SIZE)
        if "offset" in query:
            offset = query["offset"]
        else:
            offset = (query.get("page", 1) - 1) * limit

        projects = self.repo.find(
            limit=limit,
            offset=offset,
            categories=query.get("category") or None,
            featured=query.get("featured"),
            published=query.get("published"),
        )
        return _page(projects, limit, offset)

    @guarded("Failed to fetch featured projects")
    def get_featured(self, limit: Any = FEATURED_DEFAULT_LIMIT) -> dict:
        result = validate({"limit": Integer(minimum=1, default=FEATURED_DEFAULT_LIMIT)}, {"limit": limit})
        if not result.success:
            return invalid(result.errors, "Invalid query parameters")
        projects = self.repo.featured(min(result.data["limit"], MAX_PAGE_SIZE))
        return ok([p.to_dict() for p in projects], count=len(projects))

    @guarded("Failed to fetch projects by category")
    def get_by_category(self, category: Any, limit: Any = CATEGORY_DEFAULT_LIMIT, offset: Any = 0) -> dict:
        result = validate(CATEGORY_LISTING, {"category": category, "limit": limit, "offset": offset})
        if not result.success:
            return invalid(result.errors, "Invalid category")
        query = result.data
        limit = min(query.get("limit", CATEGORY_DEFAULT_LIMIT), MAX_PAGE_SIZE)
        projects = self.repo.by_category(query["category"], limit, query["offset"])
        return _page(projects, limit, query["offset"], category=query["category"])

    @guarded("Failed to search projects")
    def search(self, params: Optional[Mapping[str, Any]] = None) -> dict:
        """
        Search published projects.

        Args:
            params: q (required), optional category and featured filters, limit.
        """
        result = validate(SEARCH, sanitize_text(params))
        if not result.success:
            return invalid(result.errors, "Invalid search parameters")
        query = result.data
        projects = self.repo.search(
            query["q"],
            min(query["limit"], SEARCH_MAX_LIMIT),
            category=query.get("category"),
            featured=query.get("featured"),
        )
        return ok([p.to_dict() for p in projects], count=len(projects), search_term=query["q"])

    @guarded("Failed to fetch project statistics")
    def get_stats(self) -> dict:
        """Project counts (totals and per category) as computed by the database."""
        return ok(self.repo.stats())

    @guarded("Failed to fetch project")
    def get_by_id(self, project_id: Any) -> dict:
        checked = validate_id(project_id)
        if not checked.success:
            return invalid(checked.errors, "Invalid ID parameter")
        project = self.repo.get_by_id(checked.data["id"])
        if project is None:
            return fail(PROJECT_NOT_FOUND, NOT_FOUND)
        return ok(project.to_dict())

    @guarded("Failed to fetch project")
    def get_by_slug(self, slug: Any) -> dict:
        checked = validate(SLUG, {"slug": slug})
        if not checked.success:
            return invalid(checked.errors, "Invalid slug format")
        project = self.repo.get_by_slug(checked.data["slug"])
        if project is None:
            return fail(PROJECT_NOT_FOUND, NOT_FOUND)
        return ok(project.to_dict())

    # ── Writes ────────────────────────────────────────────

    @guarded("Failed to create project")
    def create(self, data: Optional[Mapping[str, Any]]) -> dict:
        """
        Create a project.

        The insert itself enforces slug uniqueness, so two concurrent creates
        with the same slug cannot both succeed; the loser gets ``conflict``.
        """
        result = validate(PROJECT_CREATE, sanitize_text(data))
        if not result.success:
            return invalid(result.errors)
        try:
            project = self.repo.add(result.data)
        except pg_errors.UniqueViolation:
            logger.info(f"Rejected duplicate project slug '{result.data['slug']}'")
            return fail(SLUG_TAKEN, CONFLICT)
        return ok(project.to_dict(), message="Project created successfully")

    @guarded("Failed to update project")
    def update(self, project_id: Any, data: Optional[Mapping[str, Any]]) -> dict:
        """
        Partially update a project: only fields present in ``data`` change.
        Optional columns may be cleared by passing null.
        """
        checked = validate_id(project_id)
        if not checked.success:
            return invalid(checked.errors, "Invalid ID parameter")
        result = validate(PROJECT_UPDATE, sanitize_text(data))
        if not result.success:
            return invalid(result.errors)

        update = ProjectUpdate.from_dict(result.data)
        if update.is_empty():
            return fail("No valid fields to update", VALIDATION)

        try:
            project = self.repo.update(checked.data["id"], update)
        except pg_errors.UniqueViolation:
            return fail(SLUG_TAKEN, CONFLICT)
        except pg_errors.CheckViolation:
            # Only a one-sided date change can reach here: the other bound is already stored
            return invalid([{"field": "end_date", "message": "End date must be on or after start date"}])

        if project is None:
            return fail(PROJECT_NOT_FOUND, NOT_FOUND)
        return ok(project.to_dict(), message="Project updated successfully")

    @guarded("Failed to delete project")
    def delete(self, project_id: Any) -> dict:
        checked = validate_id(project_id)
        if not checked.success:
            return invalid(checked.errors, "Invalid ID parameter")
        if not self.repo.delete(checked.data["id"]):
            return fail(PROJECT_NOT_FOUND, NOT_FOUND)
        return ok(message="Project deleted successfully")

    # ── Gallery images ────────────────────────────────────

    @guarded("Failed to add project image")
    def add_image(self, project_id: Any, data: Optional[Mapping[str, Any]]) -> dict:
        checked = validate_id(project_id)
        if not checked.success:
            return invalid(checked.errors, "Invalid ID parameter")
        result = validate(PROJECT_IMAGE, sanitize_text(data))
        if not result.success:
            return invalid(result.errors)
        image = ProjectImage(project_id=checked.data["id"], **result.data)
        try:
            image = self.images.add(image)
        except pg_errors.ForeignKeyViolation:
            return fail(PROJECT_NOT_FOUND, NOT_FOUND)
        return ok(image.to_dict())

    @guarded("Failed to fetch project images")
    def list_images(self, project_id: Any) -> dict:
        checked = validate_id(project_id)
        if not checked.success:
            return invalid(checked.errors, "Invalid ID parameter")
        images = self.images.list_for_project(checked.data["id"])
        return ok([i.to_dict() for i in images], count=len(images))

    @guarded("Failed to remove project image")
    def remove_image(self, image_id: Any) -> dict:
        checked = validate_id(image_id)
        if not checked.success:
            return invalid(checked.errors, "Invalid ID parameter")
        if not self.images.delete(checked.data["id"]):
            return fail("Image not found", NOT_FOUND)
        return ok(message="Image removed successfully")
