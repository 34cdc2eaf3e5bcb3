"""
validation/ - Validation Layer
==============================
Declarative field rules, a generic validator that evaluates them, and a text
sanitizer. Every write path runs its payload through here before any
repository is touched.
"""

from validation.sanitize import sanitize_text
from validation.validator import ValidationResult, validate, validate_id

__all__ = ["ValidationResult", "sanitize_text", "validate", "validate_id"]
