"""Field validation - requiredness and format checks for a single submitted value."""

import re

from dataentry.schemas.stage import FieldDefinition

# Permissive shape check (something@something.something), not RFC validation.
EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")

FORMAT_RULES = {
    "email": lambda value: EMAIL_PATTERN.search(value) is not None,
}


def is_blank(field: FieldDefinition, value: str | None) -> bool:
    """True if the value counts as "nothing entered" for this field."""
    if value is None or value.strip() == "":
        return True
    return field.kind == "checkbox" and value == "false"


def validate_field(field: FieldDefinition, value: str | None) -> bool:
    """Return whether ``value`` satisfies the field's requiredness and format rule."""
    if field.required and is_blank(field, value):
        return False
    if not value:
        return True  # optional and empty

    rule = FORMAT_RULES.get(field.validation_rule or "")
    if rule is None:
        return True
    return rule(value)


def field_error(field: FieldDefinition, value: str | None) -> str | None:
    """Message to show next to the field, or None if the value is valid."""
    if field.required and is_blank(field, value):
        return f"{field.label} is required"
    if not validate_field(field, value):
        return f"Please enter a valid {field.label.lower()}"
    return None


def validate_submission(fields: list[FieldDefinition], submission: dict[str, str]) -> dict[str, str]:
    """Validate every field of a form. Returns field id -> message for the failures."""
    errors: dict[str, str] = {}
    for field in fields:
        message = field_error(field, submission.get(field.id, ""))
        if message is not None:
            errors[field.id] = message
    return errors
