"""
validation/rules.py
-------------------
Field rule types. A rule is plain data tagged with a ``kind``; the validator
looks the kind up in its dispatch table, so rules carry no behaviour of
their own.

A schema is a ``dict`` mapping field name to rule:

    SCHEMA = {
        "title": String(required=True, max_length=255),
        "category": Enum(choices=("web", "mobile"), required=True),
    }
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional


class _Missing:
    """Marker for "no default configured"."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


@dataclass(frozen=True)
class Rule:
    """
    Options shared by every rule.

    Attributes:
        required: Absent (or ``None``) values are reported as missing.
        default: Applied when the field is absent. Callables are invoked.
        nullable: ``None`` is accepted and kept, meaning "clear this value".
        label: Human name used in messages (defaults to the field name).
        messages: Per-check message overrides, keyed by check name.
    """
    kind: ClassVar[str] = "any"

    required: bool = False
    default: Any = MISSING
    nullable: bool = False
    label: Optional[str] = None
    messages: dict = field(default_factory=dict, hash=False, compare=False)


@dataclass(frozen=True)
class String(Rule):
    """Text with optional length bounds and regex pattern. ``blank`` treats "" as absent."""
    kind: ClassVar[str] = "string"

    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None
    blank: bool = False
    trim: bool = True


@dataclass(frozen=True)
class Email(String):
    kind: ClassVar[str] = "email"

    max_length: Optional[int] = 255
    lowercase: bool = False


@dataclass(frozen=True)
class Url(String):
    """Absolute http(s) URL."""
    kind: ClassVar[str] = "url"

    max_length: Optional[int] = 500


@dataclass(frozen=True)
class Integer(Rule):
    """Whole number with inclusive bounds. Digit strings are coerced."""
    kind: ClassVar[str] = "integer"

    minimum: Optional[int] = None
    maximum: Optional[int] = None


@dataclass(frozen=True)
class Boolean(Rule):
    """True/False; the strings "true"/"false" are coerced."""
    kind: ClassVar[str] = "boolean"


@dataclass(frozen=True)
class Enum(Rule):
    """Closed set of string values."""
    kind: ClassVar[str] = "enum"

    choices: tuple = ()


@dataclass(frozen=True)
class IsoDate(Rule):
    """
    ISO-8601 date, normalized to ``datetime.date``.

    ``after`` names another field of the same schema that this date must not
    precede (equal dates are allowed).
    """
    kind: ClassVar[str] = "date"

    after: Optional[str] = None


@dataclass(frozen=True)
class StringList(Rule):
    """
    List of strings.

    Attributes:
        max_items: Upper bound on list length.
        item_max_length: Upper bound on each item's length.
        choices: When set, each item must be one of these.
        unique: Drop repeated items, keeping first occurrence order.
        separator: Also accept a single string split on this separator.
    """
    kind: ClassVar[str] = "string_list"

    max_items: Optional[int] = None
    item_max_length: Optional[int] = None
    choices: tuple = ()
    unique: bool = False
    separator: Optional[str] = None
