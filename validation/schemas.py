"""
validation/schemas.py
---------------------
Field schemas for every write path and for the list/search query strings.
"""

from config import DEFAULT_PAGE_SIZE, PASSWORD_MIN_LENGTH
from validation.rules import MISSING, Boolean, Email, Enum, Integer, IsoDate, String, StringList, Url

PROJECT_CATEGORIES = ("web", "mobile", "3d", "animation", "illustration", "game", "other")
MESSAGE_STATUSES = ("unread", "read", "replied", "archived")
MESSAGE_PRIORITIES = ("low", "medium", "high")

SLUG_PATTERN = r"[a-z0-9-]+"
SLUG_MESSAGE = "Slug must contain only lowercase letters, numbers, and hyphens"

_PROJECT_URLS = {
    "client_url": "Client URL",
    "project_url": "Project URL",
    "github_url": "GitHub URL",
    "demo_url": "Demo URL",
    "image_url": "Image URL",
    "thumbnail_url": "Thumbnail URL",
    "video_url": "Video URL",
    "model_url": "Model URL",
}


def _project_schema(creating: bool) -> dict:
    """
    Creation requires the core fields and fills defaults. Updates make every
    field optional, apply no defaults, and let optional columns be cleared
    with null.
    """
    def default(value):
        return value if creating else MISSING

    clearable = not creating
    schema = {
        "title": String(required=creating, max_length=255),
        "slug": String(
            required=creating, max_length=255, pattern=SLUG_PATTERN,
            messages={"pattern": SLUG_MESSAGE},
        ),
        "description": String(
            required=creating, max_length=65535,
            messages={"max_length": "Description is too long"},
        ),
        "short_description": String(max_length=500, blank=True, nullable=clearable),
        "category": Enum(choices=PROJECT_CATEGORIES, required=creating),
        "technologies": StringList(item_max_length=100, max_items=20, default=default(list)),
        "tags": StringList(item_max_length=50, max_items=15, unique=True, default=default(list)),
        "client": String(max_length=255, blank=True, nullable=clearable),
        "featured": Boolean(default=default(False)),
        "published": Boolean(default=default(True)),
        "featured_order": Integer(minimum=0, maximum=1000, default=default(0)),
        "project_order": Integer(minimum=0, maximum=1000, default=default(0)),
        "start_date": IsoDate(nullable=clearable),
        "end_date": IsoDate(
            nullable=clearable, after="start_date",
            messages={"after": "End date must be on or after start date"},
        ),
    }
    for name, label in _PROJECT_URLS.items():
        schema[name] = Url(blank=True, nullable=clearable, label=label)
    return schema


PROJECT_CREATE = _project_schema(creating=True)
PROJECT_UPDATE = _project_schema(creating=False)

PROJECT_IMAGE = {
    "url": Url(required=True, label="Image URL"),
    "caption": String(max_length=255, blank=True),
    "sort_order": Integer(minimum=0, maximum=1000, default=0),
}

SLUG = {
    "slug": String(required=True, max_length=255, pattern=SLUG_PATTERN, messages={"pattern": "Invalid slug format"}),
}

# Offsets and pages fit the INT parameters of the stored routines
MAX_OFFSET = 2**31 - 1

PAGINATION = {
    "limit": Integer(minimum=1, default=DEFAULT_PAGE_SIZE),
    "offset": Integer(minimum=0, maximum=MAX_OFFSET),
    "page": Integer(minimum=1, maximum=MAX_OFFSET),
}

PROJECT_FILTER = {
    **PAGINATION,
    "category": StringList(choices=PROJECT_CATEGORIES, separator=",", unique=True),
    "featured": Boolean(),
    "published": Boolean(),
}

CATEGORY_LISTING = {
    "category": Enum(choices=PROJECT_CATEGORIES, required=True),
    "limit": Integer(minimum=1),
    "offset": Integer(minimum=0, maximum=MAX_OFFSET, default=0),
}

SEARCH = {
    "q": String(required=True, max_length=255, label="Search term"),
    "category": Enum(choices=PROJECT_CATEGORIES),
    "featured": Boolean(),
    "limit": Integer(minimum=1, default=DEFAULT_PAGE_SIZE),
}

CONTACT_CREATE = {
    "name": String(
        required=True, max_length=255, pattern=r"[a-zA-Z\s'-]+",
        messages={"pattern": "Name can only contain letters, spaces, hyphens, and apostrophes"},
    ),
    "email": Email(required=True),
    "phone": String(
        max_length=50, pattern=r"\+?[1-9]\d{0,15}", blank=True,
        messages={"pattern": "Please provide a valid phone number"},
    ),
    "company": String(max_length=255, blank=True),
    "subject": String(max_length=255, blank=True),
    "message": String(
        required=True, max_length=10000,
        messages={"max_length": "Message cannot exceed 10,000 characters"},
    ),
}

CONTACT_STATUS_UPDATE = {
    "status": Enum(choices=MESSAGE_STATUSES, required=True),
    "priority": Enum(choices=MESSAGE_PRIORITIES),
}

MESSAGE_FILTER = {
    "status": Enum(choices=MESSAGE_STATUSES),
    "priority": Enum(choices=MESSAGE_PRIORITIES),
    "limit": Integer(minimum=1, default=50),
    "offset": Integer(minimum=0, maximum=MAX_OFFSET, default=0),
}

_PASSWORD_MESSAGES = {"min_length": f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"}

REGISTER = {
    "username": String(
        required=True, min_length=3, max_length=50, pattern=r"[A-Za-z0-9_.-]+",
        messages={"pattern": "Username can only contain letters, numbers, dots, hyphens, and underscores"},
    ),
    "email": Email(required=True, lowercase=True),
    "password": String(
        required=True, min_length=PASSWORD_MIN_LENGTH, max_length=128, trim=False,
        messages=_PASSWORD_MESSAGES,
    ),
}

LOGIN = {
    "username": String(required=True, max_length=255, label="Username or email"),
    "password": String(required=True, max_length=128, trim=False),
}

CHANGE_PASSWORD = {
    "current_password": String(required=True, max_length=128, trim=False),
    "new_password": String(
        required=True, min_length=PASSWORD_MIN_LENGTH, max_length=128, trim=False,
        messages={"min_length": f"New password must be at least {PASSWORD_MIN_LENGTH} characters long"},
    ),
}
