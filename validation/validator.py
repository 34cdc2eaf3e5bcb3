"""
validation/validator.py
-----------------------
Generic evaluator for rule schemas.

`validate(schema, data)` checks every field in one pass and either returns
the normalized values (unknown keys dropped, defaults applied, text trimmed,
dates parsed) or the full list of ``{"field", "message"}`` errors.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional
from urllib.parse import urlparse

from validation.rules import MISSING, Integer, Rule

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]{2,}$")

_TRUE_STRINGS = {"true", "1", "yes"}
_FALSE_STRINGS = {"false", "0", "no"}

# Column bounds: BIGINT for limits/offsets, SERIAL for row ids
_BIGINT_MAX = 2**63 - 1
_SERIAL_MAX = 2**31 - 1


@dataclass
class ValidationResult:
    success: bool
    data: dict = field(default_factory=dict)
    errors: list[dict] = field(default_factory=list)


class _Invalid(Exception):
    """Raised by a check to report one error for the current field."""

    def __init__(self, message: str, field_name: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field_name = field_name


def _label(name: str, rule: Rule) -> str:
    return rule.label or name.replace("_", " ").capitalize()


def _message(rule: Rule, check: str, default: str) -> str:
    return rule.messages.get(check, default)


# ── Per-kind checks ───────────────────────────────────────
# Each takes (name, rule, value) and returns the normalized value or raises _Invalid.

def _check_string(name: str, rule, value: Any) -> str:
    label = _label(name, rule)
    if not isinstance(value, str):
        raise _Invalid(_message(rule, "type", f"{label} must be a string"))
    if rule.trim:
        value = value.strip()
    if rule.min_length is not None and len(value) < rule.min_length:
        raise _Invalid(_message(rule, "min_length", f"{label} must be at least {rule.min_length} characters long"))
    if rule.max_length is not None and len(value) > rule.max_length:
        raise _Invalid(_message(rule, "max_length", f"{label} cannot exceed {rule.max_length} characters"))
    if rule.pattern is not None and not re.fullmatch(rule.pattern, value):
        raise _Invalid(_message(rule, "pattern", f"{label} has an invalid format"))
    return value


def _check_email(name: str, rule, value: Any) -> str:
    value = _check_string(name, rule, value)
    if not EMAIL_RE.fullmatch(value):
        raise _Invalid(_message(rule, "email", "Please provide a valid email address"))
    return value.lower() if rule.lowercase else value


def _check_url(name: str, rule, value: Any) -> str:
    value = _check_string(name, rule, value)
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise _Invalid(_message(rule, "url", f"{_label(name, rule)} must be a valid URL"))
    return value


def _check_integer(name: str, rule, value: Any) -> int:
    label = _label(name, rule)
    if isinstance(value, bool):
        raise _Invalid(_message(rule, "type", f"{label} must be an integer"))
    if isinstance(value, str) and re.fullmatch(r"\s*[+-]?\d{1,18}\s*", value):
        value = int(value)
    elif isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or abs(value) > _BIGINT_MAX:
        raise _Invalid(_message(rule, "type", f"{label} must be an integer"))
    if rule.minimum is not None and value < rule.minimum:
        raise _Invalid(_message(rule, "minimum", f"{label} must be {rule.minimum} or greater"))
    if rule.maximum is not None and value > rule.maximum:
        raise _Invalid(_message(rule, "maximum", f"{label} cannot exceed {rule.maximum}"))
    return value


def _check_boolean(name: str, rule, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise _Invalid(_message(rule, "type", f"{_label(name, rule)} must be true or false"))


def _check_enum(name: str, rule, value: Any) -> str:
    if isinstance(value, str):
        value = value.strip()
    if value not in rule.choices:
        raise _Invalid(_message(
            rule, "choices", f"{_label(name, rule)} must be one of: {', '.join(rule.choices)}"
        ))
    return value


def parse_iso_date(value: Any) -> Optional[date]:
    """Parse an ISO-8601 date or datetime string; return None if unparseable."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _check_date(name: str, rule, value: Any) -> date:
    parsed = parse_iso_date(value)
    if parsed is None:
        raise _Invalid(_message(rule, "format", f"{_label(name, rule)} must be a valid ISO date"))
    return parsed


def _check_string_list(name: str, rule, value: Any) -> list[str]:
    label = _label(name, rule)
    if isinstance(value, str) and rule.separator is not None:
        value = [part for part in value.split(rule.separator)]
    if not isinstance(value, (list, tuple)):
        raise _Invalid(_message(rule, "type", f"{label} must be a list"))

    items: list[str] = []
    for index, item in enumerate(value):
        item_field = f"{name}.{index}"
        if not isinstance(item, str):
            raise _Invalid(f"{label} items must be strings", item_field)
        item = item.strip()
        if not item:
            if rule.separator is not None:
                continue
            raise _Invalid(f"{label} items cannot be empty", item_field)
        if rule.item_max_length is not None and len(item) > rule.item_max_length:
            raise _Invalid(f"{label} items cannot exceed {rule.item_max_length} characters", item_field)
        if rule.choices and item not in rule.choices:
            raise _Invalid(f"{label} must be one of: {', '.join(rule.choices)}", item_field)
        if rule.unique and item in items:
            continue
        items.append(item)

    if rule.max_items is not None and len(items) > rule.max_items:
        raise _Invalid(_message(
            rule, "max_items", f"Cannot have more than {rule.max_items} {label.lower()}"
        ))
    return items


_CHECKS: dict[str, Callable[[str, Rule, Any], Any]] = {
    "any": lambda name, rule, value: value,
    "string": _check_string,
    "email": _check_email,
    "url": _check_url,
    "integer": _check_integer,
    "boolean": _check_boolean,
    "enum": _check_enum,
    "date": _check_date,
    "string_list": _check_string_list,
}


def _is_blank_string(value: Any) -> bool:
    return isinstance(value, str) and not value.strip()


def validate(schema: Mapping[str, Rule], data: Optional[Mapping[str, Any]]) -> ValidationResult:
    """
    Validate ``data`` against ``schema``.

    Every field is checked even after an earlier one fails, so the caller
    gets all problems at once. Fields not named in the schema are dropped.

    Returns:
        ValidationResult with ``data`` on success or ``errors`` on failure.
    """
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        return ValidationResult(False, errors=[{"field": "", "message": "Payload must be an object"}])

    normalized: dict[str, Any] = {}
    errors: list[dict] = []

    for name, rule in schema.items():
        label = _label(name, rule)
        present = name in data and data[name] is not None

        if name in data and data[name] is None and rule.nullable:
            normalized[name] = None
            continue

        if present and _is_blank_string(data[name]) and rule.kind != "any":
            if getattr(rule, "blank", False):
                if rule.nullable:
                    normalized[name] = None
                continue
            errors.append({"field": name, "message": _message(rule, "empty", f"{label} cannot be empty")})
            continue

        if not present:
            if rule.required:
                errors.append({"field": name, "message": _message(rule, "required", f"{label} is required")})
            elif rule.default is not MISSING:
                normalized[name] = rule.default() if callable(rule.default) else rule.default
            continue

        try:
            normalized[name] = _CHECKS[rule.kind](name, rule, data[name])
        except _Invalid as e:
            errors.append({"field": e.field_name or name, "message": e.message})

    # Cross-field date ordering, only between values that passed their own checks
    for name, rule in schema.items():
        other = getattr(rule, "after", None)
        if not other:
            continue
        value, floor = normalized.get(name), normalized.get(other)
        if isinstance(value, date) and isinstance(floor, date) and value < floor:
            default = f"{_label(name, rule)} must be on or after {_label(other, schema[other]).lower()}"
            errors.append({"field": name, "message": _message(rule, "after", default)})

    if errors:
        return ValidationResult(False, errors=errors)
    return ValidationResult(True, data=normalized)


def validate_id(value: Any, name: str = "id") -> ValidationResult:
    """Validate a positive integer identifier (path parameter)."""
    try:
        parsed = _check_integer(name, Integer(minimum=1, maximum=_SERIAL_MAX), value)
    except _Invalid:
        return ValidationResult(False, errors=[{"field": name, "message": f"Invalid {name} parameter"}])
    return ValidationResult(True, data={name: parsed})
