"""
db/init_db.py
-------------
Creates the database schema (tables, indexes, stored routines) if it does
not already exist. Every statement is idempotent, so this runs on each
startup; schema changes are additive only.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from db.connection import DatabasePool
from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
-- Users table: admin and regular accounts
CREATE TABLE IF NOT EXISTS users (
    id              SERIAL PRIMARY KEY,
    username        VARCHAR(255) UNIQUE NOT NULL,
    email           VARCHAR(255) UNIQUE NOT NULL,
    password_hash   VARCHAR(255) NOT NULL,
    role            VARCHAR(10) NOT NULL DEFAULT 'user' CHECK (role IN ('admin', 'user')),
    created_at      TIMESTAMPTZ DEFAULT NOW(),
    updated_at      TIMESTAMPTZ DEFAULT NOW()
);

-- Projects table: portfolio entries shown on the site
CREATE TABLE IF NOT EXISTS projects (
    id                  SERIAL PRIMARY KEY,
    title               VARCHAR(255) NOT NULL,
    slug                VARCHAR(255) NOT NULL,
    description         TEXT NOT NULL,
    short_description   VARCHAR(500),
    category            VARCHAR(20) NOT NULL CHECK (category IN
                            ('web', 'mobile', '3d', 'animation', 'illustration', 'game', 'other')),
    technologies        JSONB NOT NULL DEFAULT '[]'::jsonb,
    tags                JSONB NOT NULL DEFAULT '[]'::jsonb,
    client              VARCHAR(255),
    client_url          VARCHAR(500),
    project_url         VARCHAR(500),
    github_url          VARCHAR(500),
    demo_url            VARCHAR(500),
    image_url           VARCHAR(500),
    thumbnail_url       VARCHAR(500),
    video_url           VARCHAR(500),
    model_url           VARCHAR(500),
    featured            BOOLEAN NOT NULL DEFAULT FALSE,
    published           BOOLEAN NOT NULL DEFAULT TRUE,
    featured_order      INT NOT NULL DEFAULT 0,
    project_order       INT NOT NULL DEFAULT 0,
    start_date          DATE,
    end_date            DATE,
    created_at          TIMESTAMPTZ DEFAULT NOW(),
    updated_at          TIMESTAMPTZ DEFAULT NOW(),
    CONSTRAINT chk_projects_date_range
        CHECK (start_date IS NULL OR end_date IS NULL OR end_date >= start_date)
);

-- Project images: gallery entries owned by a project
CREATE TABLE IF NOT EXISTS project_images (
    id              SERIAL PRIMARY KEY,
    project_id      INT NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
    url             VARCHAR(500) NOT NULL,
    caption         VARCHAR(255),
    sort_order      INT NOT NULL DEFAULT 0,
    created_at      TIMESTAMPTZ DEFAULT NOW()
);

-- Contact messages: public submissions plus triage state
CREATE TABLE IF NOT EXISTS contact_messages (
    id              SERIAL PRIMARY KEY,
    name            VARCHAR(255) NOT NULL,
    email           VARCHAR(255) NOT NULL,
    phone           VARCHAR(50),
    company         VARCHAR(255),
    subject         VARCHAR(255),
    message         TEXT NOT NULL,
    status          VARCHAR(20) NOT NULL DEFAULT 'unread'
                        CHECK (status IN ('unread', 'read', 'replied', 'archived')),
    priority        VARCHAR(10) NOT NULL DEFAULT 'medium'
                        CHECK (priority IN ('low', 'medium', 'high')),
    source          VARCHAR(50) DEFAULT 'contact_form',
    ip_address      VARCHAR(45),
    user_agent      VARCHAR(512),
    created_at      TIMESTAMPTZ DEFAULT NOW(),
    updated_at      TIMESTAMPTZ DEFAULT NOW()
);

-- Uploads table: metadata for files stored on disk
CREATE TABLE IF NOT EXISTS uploads (
    id              SERIAL PRIMARY KEY,
    filename        VARCHAR(255) NOT NULL,
    original_name   VARCHAR(255) NOT NULL,
    mime_type       VARCHAR(100) NOT NULL,
    size            BIGINT NOT NULL,
    path            VARCHAR(500) NOT NULL,
    uploaded_by     INT REFERENCES users(id) ON DELETE SET NULL,
    created_at      TIMESTAMPTZ DEFAULT NOW()
);
"""

# Columns added after the first release. Databases created by an older
# version gain them on the next startup; fresh databases already have them.
ADDITIVE_COLUMNS = [
    ("projects", "slug", "VARCHAR(255)"),
    ("projects", "short_description", "VARCHAR(500)"),
    ("projects", "tags", "JSONB NOT NULL DEFAULT '[]'::jsonb"),
    ("projects", "client", "VARCHAR(255)"),
    ("projects", "client_url", "VARCHAR(500)"),
    ("projects", "project_url", "VARCHAR(500)"),
    ("projects", "demo_url", "VARCHAR(500)"),
    ("projects", "thumbnail_url", "VARCHAR(500)"),
    ("projects", "published", "BOOLEAN NOT NULL DEFAULT TRUE"),
    ("projects", "featured_order", "INT NOT NULL DEFAULT 0"),
    ("projects", "project_order", "INT NOT NULL DEFAULT 0"),
    ("projects", "start_date", "DATE"),
    ("projects", "end_date", "DATE"),
    ("contact_messages", "phone", "VARCHAR(50)"),
    ("contact_messages", "company", "VARCHAR(255)"),
    ("contact_messages", "priority", "VARCHAR(10) NOT NULL DEFAULT 'medium'"),
    ("contact_messages", "source", "VARCHAR(50) DEFAULT 'contact_form'"),
    ("contact_messages", "ip_address", "VARCHAR(45)"),
    ("contact_messages", "user_agent", "VARCHAR(512)"),
    ("contact_messages", "updated_at", "TIMESTAMPTZ DEFAULT NOW()"),
]

INDEX_SQL = """
CREATE UNIQUE INDEX IF NOT EXISTS idx_projects_slug ON projects(slug);
CREATE INDEX IF NOT EXISTS idx_projects_category ON projects(category);
CREATE INDEX IF NOT EXISTS idx_projects_listing ON projects(featured_order, project_order, created_at DESC);
CREATE INDEX IF NOT EXISTS idx_projects_featured ON projects(featured_order) WHERE featured = TRUE AND published = TRUE;
CREATE INDEX IF NOT EXISTS idx_project_images_project ON project_images(project_id, sort_order);
CREATE INDEX IF NOT EXISTS idx_contact_status ON contact_messages(status, created_at DESC);
CREATE INDEX IF NOT EXISTS idx_uploads_uploaded_by ON uploads(uploaded_by);
"""

# Stored routines backing the featured/category/search/stats reads
ROUTINES_SQL = """
CREATE OR REPLACE FUNCTION get_featured_projects(p_limit INT)
RETURNS SETOF projects AS $$
    SELECT * FROM projects
    WHERE featured = TRUE AND published = TRUE
    ORDER BY featured_order ASC, project_order ASC, created_at DESC, id DESC
    LIMIT p_limit;
$$ LANGUAGE sql STABLE;

CREATE OR REPLACE FUNCTION get_projects_by_category(p_category VARCHAR, p_limit INT, p_offset INT)
RETURNS SETOF projects AS $$
    SELECT * FROM projects
    WHERE category = p_category AND published = TRUE
    ORDER BY featured_order ASC, project_order ASC, created_at DESC, id DESC
    LIMIT p_limit OFFSET p_offset;
$$ LANGUAGE sql STABLE;

CREATE OR REPLACE FUNCTION search_projects(
    p_term TEXT, p_limit INT, p_category VARCHAR DEFAULT NULL, p_featured BOOLEAN DEFAULT NULL
)
RETURNS SETOF projects AS $$
    SELECT * FROM projects
    WHERE published = TRUE
      AND (p_category IS NULL OR category = p_category)
      AND (p_featured IS NULL OR featured = p_featured)
      AND (title ILIKE '%' || p_term || '%'
           OR description ILIKE '%' || p_term || '%'
           OR short_description ILIKE '%' || p_term || '%'
           OR technologies::text ILIKE '%' || p_term || '%'
           OR tags::text ILIKE '%' || p_term || '%')
    ORDER BY featured DESC, created_at DESC, id DESC
    LIMIT p_limit;
$$ LANGUAGE sql STABLE;

CREATE OR REPLACE FUNCTION get_project_stats()
RETURNS TABLE (
    total_projects      BIGINT,
    published_projects  BIGINT,
    featured_projects   BIGINT,
    by_category         JSONB
) AS $$
    SELECT
        COUNT(*),
        COUNT(*) FILTER (WHERE published),
        COUNT(*) FILTER (WHERE featured AND published),
        COALESCE(
            (SELECT jsonb_object_agg(c.category, c.n)
             FROM (SELECT category, COUNT(*) AS n FROM projects GROUP BY category) c),
            '{}'::jsonb
        )
    FROM projects;
$$ LANGUAGE sql STABLE;
"""

# Keeps updated_at current on every UPDATE, whoever issues it
TRIGGERS_SQL = """
CREATE OR REPLACE FUNCTION set_updated_at()
RETURNS TRIGGER AS $$
BEGIN
    NEW.updated_at = NOW();
    RETURN NEW;
END;
$$ LANGUAGE plpgsql;

DROP TRIGGER IF EXISTS trg_users_updated_at ON users;
CREATE TRIGGER trg_users_updated_at BEFORE UPDATE ON users
    FOR EACH ROW EXECUTE FUNCTION set_updated_at();

DROP TRIGGER IF EXISTS trg_projects_updated_at ON projects;
CREATE TRIGGER trg_projects_updated_at BEFORE UPDATE ON projects
    FOR EACH ROW EXECUTE FUNCTION set_updated_at();

DROP TRIGGER IF EXISTS trg_contact_messages_updated_at ON contact_messages;
CREATE TRIGGER trg_contact_messages_updated_at BEFORE UPDATE ON contact_messages
    FOR EACH ROW EXECUTE FUNCTION set_updated_at();
"""


def migration_statements() -> list[str]:
    """Render the ADD COLUMN IF NOT EXISTS statements for `ADDITIVE_COLUMNS`."""
    return [
        f"ALTER TABLE {table} ADD COLUMN IF NOT EXISTS {column} {definition};"
        for table, column, definition in ADDITIVE_COLUMNS
    ]


def create_tables(db: DatabasePool) -> None:
    """
    Execute the schema SQL to create all tables, columns, indexes, routines
    and triggers.
    Safe to call multiple times (uses IF NOT EXISTS / OR REPLACE).

    Args:
        db: An opened DatabasePool.
    """
    try:
        with db.cursor(commit=True) as cur:
            cur.execute(SCHEMA_SQL)
            for statement in migration_statements():
                cur.execute(statement)
            cur.execute(INDEX_SQL)
            cur.execute(ROUTINES_SQL)
            cur.execute(TRIGGERS_SQL)
        logger.info("Database schema initialized successfully.")
    except Exception as e:
        logger.error(f"Failed to initialize schema: {e}")
        raise


if __name__ == "__main__":
    pool = DatabasePool()
    pool.open()
    try:
        create_tables(pool)
    finally:
        pool.close()
    print("Database schema created successfully.")
