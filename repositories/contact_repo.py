"""
repositories/contact_repo.py
----------------------------
Data access layer for contact form messages.
All SQL queries related to the `contact_messages` table live here.
"""

from typing import Optional

from db.connection import DatabasePool
from models.contact_message import ContactMessage
from utils.logger import get_logger

logger = get_logger(__name__)


class ContactRepository:
    """Repository for CRUD operations on the contact_messages table."""

    def __init__(self, db: DatabasePool):
        self.db = db

    # ── CREATE ────────────────────────────────────────────

    def add(self, message: ContactMessage) -> ContactMessage:
        """
        Insert a new contact message. Status and priority take their column
        defaults.

        Returns:
            The stored ContactMessage as the database sees it.
        """
        sql = """
            INSERT INTO contact_messages
                (name, email, phone, company, subject, message, source, ip_address, user_agent)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING *;
        """
        with self.db.cursor(commit=True) as cur:
            cur.execute(sql, (
                message.name, message.email, message.phone, message.company,
                message.subject, message.message, message.source,
                message.ip_address, message.user_agent,
            ))
            saved = ContactMessage.from_row(cur.fetchone())
        logger.info(f"Stored contact message #{saved.id} from {saved.email} (source={saved.source})")
        return saved

    # ── READ ──────────────────────────────────────────────

    def get_by_id(self, message_id: int) -> Optional[ContactMessage]:
        with self.db.cursor() as cur:
            cur.execute("SELECT * FROM contact_messages WHERE id = %s;", (message_id,))
            row = cur.fetchone()
        return ContactMessage.from_row(row) if row else None

    def find(
        self,
        limit: int,
        offset: int = 0,
        status: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> list[ContactMessage]:
        """
        Fetch a page of messages, newest first.

        Args:
            status: Optional status filter.
            priority: Optional priority filter.
        """
        sql = "SELECT * FROM contact_messages WHERE 1=1"
        params: list = []
        if status:
            sql += " AND status = %s"
            params.append(status)
        if priority:
            sql += " AND priority = %s"
            params.append(priority)
        sql += " ORDER BY created_at DESC, id DESC LIMIT %s OFFSET %s;"
        params.extend([limit, offset])

        with self.db.cursor() as cur:
            cur.execute(sql, params)
            return [ContactMessage.from_row(r) for r in cur.fetchall()]

    def unread(self) -> list[ContactMessage]:
        """All unread messages, high priority first, then newest."""
        sql = """
            SELECT * FROM contact_messages
            WHERE status = 'unread'
            ORDER BY CASE priority WHEN 'high' THEN 0 WHEN 'medium' THEN 1 ELSE 2 END,
                     created_at DESC, id DESC;
        """
        with self.db.cursor() as cur:
            cur.execute(sql)
            return [ContactMessage.from_row(r) for r in cur.fetchall()]

    # ── UPDATE ────────────────────────────────────────────

    def update_status(
        self, message_id: int, status: str, priority: Optional[str] = None
    ) -> Optional[ContactMessage]:
        """
        Set the status, and the priority when one is given.

        Returns:
            The updated message, or None if no row has that id.
        """
        sql = """
            UPDATE contact_messages
            SET status = %s, priority = COALESCE(%s, priority)
            WHERE id = %s
            RETURNING *;
        """
        with self.db.cursor(commit=True) as cur:
            cur.execute(sql, (status, priority, message_id))
            row = cur.fetchone()
        if row:
            logger.info(f"Message #{message_id} -> status={row['status']}, priority={row['priority']}")
        return ContactMessage.from_row(row) if row else None

    # ── DELETE ────────────────────────────────────────────

    def delete(self, message_id: int) -> bool:
        with self.db.cursor(commit=True) as cur:
            cur.execute("DELETE FROM contact_messages WHERE id = %s;", (message_id,))
            deleted = cur.rowcount > 0
        if deleted:
            logger.info(f"Deleted contact message #{message_id}")
        return deleted
