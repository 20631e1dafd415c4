"""Declarative field validators for service inputs.

Each request type has a rule table: field name -> checks. A check returns a
reason string when the value is rejected, None otherwise. Every failing
reason for every field is collected into one VALIDATION failure.
"""

import re
from collections.abc import Callable, Mapping

from accountkit.core.results import ErrorKind, Failure, FieldErrors

FieldCheck = Callable[[str], str | None]

# Printable ASCII symbols: ! through /, : through @, [ through `, { through ~
_SYMBOL_PATTERN = r"[\x21-\x2f\x3a-\x40\x5b-\x60\x7b-\x7e]"


def min_length(limit: int, reason: str) -> FieldCheck:
    def check(value: str) -> str | None:
        return reason if len(value) < limit else None

    return check


def max_length(limit: int, reason: str) -> FieldCheck:
    def check(value: str) -> str | None:
        return reason if len(value) > limit else None

    return check


def matches(pattern: str, reason: str) -> FieldCheck:
    """Reject values with no match for ``pattern`` (searched, not anchored)."""
    compiled = re.compile(pattern)

    def check(value: str) -> str | None:
        return None if compiled.search(value) else reason

    return check


def full_match(pattern: str, reason: str) -> FieldCheck:
    """Reject values that ``pattern`` does not match end to end."""
    compiled = re.compile(pattern)

    def check(value: str) -> str | None:
        return None if compiled.fullmatch(value) else reason

    return check


def ascii_only(reason: str) -> FieldCheck:
    def check(value: str) -> str | None:
        return None if value.isascii() else reason

    return check


REGISTRATION_RULES: Mapping[str, tuple[FieldCheck, ...]] = {
    "email": (
        max_length(255, "must be at most 255 characters"),
        full_match(r"\S+@\S+", "is not a valid email address"),
    ),
    "screenName": (
        min_length(1, "must be between 1 and 32 characters"),
        max_length(32, "must be between 1 and 32 characters"),
    ),
    "password": (
        min_length(6, "must be between 6 and 1024 characters"),
        max_length(1024, "must be between 6 and 1024 characters"),
        ascii_only("may only contain ASCII letters, digits and symbols"),
        matches(r"[A-Z]", "must contain at least one uppercase letter"),
        matches(_SYMBOL_PATTERN, "must contain at least one symbol"),
    ),
}


def validate_fields(
    values: Mapping[str, str],
    rules: Mapping[str, tuple[FieldCheck, ...]],
) -> Failure | None:
    """Run every rule against its field.

    Args:
        values: Field name -> submitted value. Fields without rules are ignored.
        rules: Rule table for the request type.

    Returns:
        A VALIDATION failure listing every rejected field, or None.
    """
    errors = FieldErrors()
    for field_name, checks in rules.items():
        value = values.get(field_name, "")
        for check in checks:
            reason = check(value)
            if reason is not None:
                errors.add(field_name, reason)
    return errors.to_failure(ErrorKind.VALIDATION) if errors else None
