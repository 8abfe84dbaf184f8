"""Typed errors shared by the task, fine and compensation services.

All of them are DRF ``APIException`` subclasses, so a view can let them
propagate and DRF renders ``{"detail": ..., "code": ...}`` with the matching
status code.
"""

from __future__ import annotations

from typing import Optional

from rest_framework import status
from rest_framework.exceptions import APIException


class EngineError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request could not be processed."
    default_code = "engine_error"


class ValidationError(EngineError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    default_code = "invalid"


class NotFoundError(EngineError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class AuthorizationError(EngineError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied."
    default_code = "forbidden"

    def __init__(self, detail=None, code=None, *, field: Optional[str] = None):
        self.field = field
        if field and detail is None:
            detail = f"You are not allowed to edit '{field}'."
        super().__init__(detail=detail, code=code)
        if field:
            self.detail = {"detail": self.detail, "field": field}


class ConcurrencyConflict(EngineError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Record was modified concurrently. Refresh and try again."
    default_code = "conflict"
