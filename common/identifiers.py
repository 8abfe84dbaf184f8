from __future__ import annotations

from collections.abc import Mapping

from django.db import models

from .exceptions import ValidationError


def normalize_id(value, *, field: str = "id") -> int:
    """Collapse the id shapes seen at the API boundary into a plain ``int``.

    Accepts ints, numeric strings, model instances and ``{"id": ...}`` mappings.
    """
    if isinstance(value, models.Model):
        value = value.pk
    elif isinstance(value, Mapping):
        value = value.get("id", value.get("pk"))

    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} is required.")
    if isinstance(value, int):
        candidate = value
    elif isinstance(value, str) and value.strip().isdigit():
        candidate = int(value.strip())
    else:
        raise ValidationError(f"{field} must be a positive integer.")
    if candidate <= 0:
        raise ValidationError(f"{field} must be a positive integer.")
    return candidate


def normalize_ids(values, *, field: str = "ids") -> list[int]:
    if values is None:
        return []
    if not isinstance(values, (list, tuple, set)):
        values = [values]
    return sorted({normalize_id(value, field=field) for value in values})
