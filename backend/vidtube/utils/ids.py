"""Identifier validation - every client-supplied reference passes through here before a query"""
import uuid

from vidtube.core.errors import ValidationError


def is_valid_id(value) -> bool:
    """True if value is a canonical UUID string (the form generated by models.base.new_id)"""
    if not isinstance(value, str):
        return False
    try:
        return str(uuid.UUID(value)) == value.lower()
    except (ValueError, AttributeError, TypeError):
        return False


def ensure_valid_id(value, label: str = "resource") -> str:
    """Return the normalized id or raise ValidationError ("Invalid video ID!" style message)"""
    if not is_valid_id(value):
        raise ValidationError(f"Invalid {label} ID!")
    return value.lower()
