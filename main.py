"""
main.py
-------
Entry point for the portfolio backend.

Responsibilities:
    - Open the database connection pool and ensure the schema.
    - Build the services that share that pool.
    - Seed the first admin account when one is configured.
"""

from typing import Optional

from config import ADMIN_EMAIL, ADMIN_PASSWORD, ADMIN_USERNAME
from db.connection import DatabasePool
from db.init_db import create_tables
from services.auth_service import AuthService
from services.contact_service import ContactService
from services.project_service import ProjectService
from services.upload_service import UploadService
from utils.logger import get_logger

logger = get_logger(__name__)


class Application:
    """
    Owns the connection pool and every service built on it.
    Construct through create_app() and call close() when done.
    """

    def __init__(self, db: DatabasePool):
        self.db = db
        self.projects = ProjectService(db)
        self.contacts = ContactService(db)
        self.auth = AuthService(db)
        self.uploads = UploadService(db)

    def close(self) -> None:
        self.db.close()

    def __enter__(self) -> "Application":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def create_app(db: Optional[DatabasePool] = None) -> Application:
    """Open the pool (if not already open), ensure the schema, and wire the services."""
    db = db or DatabasePool()
    db.open()
    create_tables(db)
    return Application(db)


def main() -> None:
    """Initialize the backend, seed the admin, and report what is stored."""

    # ── 1. Database setup ─────────────────────────────────
    logger.info("Initializing database...")
    app = create_app()

    with app:
        # ── 2. Seed the first admin ───────────────────────
        if ADMIN_USERNAME and ADMIN_EMAIL and ADMIN_PASSWORD:
            app.auth.ensure_admin(ADMIN_USERNAME, ADMIN_EMAIL, ADMIN_PASSWORD)
        else:
            logger.info("ADMIN_* not configured, skipping admin seed")

        # ── 3. Report ─────────────────────────────────────
        stats = app.projects.get_stats()
        if stats["success"]:
            data = stats["data"]
            logger.info(
                f"🚀 Portfolio backend ready: {data['total_projects']} projects "
                f"({data['published_projects']} published, {data['featured_projects']} featured)"
            )
        else:
            logger.error(f"Could not read project stats: {stats['error']}")

    logger.info("Portfolio backend stopped.")


if __name__ == "__main__":
    main()
