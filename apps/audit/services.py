from __future__ import annotations

import logging
from typing import Optional

from django.conf import settings

from .backends import (
    AccountsAuditBackend,
    AuditBackend,
    LoggingAuditBackend,
    NoopAuditBackend,
)
from .contracts import AuditEvent


logger = logging.getLogger("worknest.audit")


class AuditService:
    """
    Unified entrypoint for audit logging.

    Modes:
    - primary_only (default): write only to primary backend
    - dual_write: write to primary and secondary backends
    - secondary_only: write only to secondary backend
    """

    def __init__(self) -> None:
        self.primary_backend = self._build_backend(
            getattr(settings, "AUDIT_PRIMARY_BACKEND", "accounts")
        )
        self.secondary_backend = self._build_backend(
            getattr(settings, "AUDIT_LEGACY_BACKEND", "logging")
        )
        self.mode = getattr(settings, "AUDIT_WRITE_MODE", "primary_only")

    def _build_backend(self, name: str) -> AuditBackend:
        if name == "accounts":
            return AccountsAuditBackend()
        if name == "logging":
            return LoggingAuditBackend()
        return NoopAuditBackend()

    def log(self, event: AuditEvent) -> None:
        try:
            if self.mode == "secondary_only":
                self.secondary_backend.write(event)
                return

            self.primary_backend.write(event)

            if self.mode == "dual_write":
                self.secondary_backend.write(event)
        except Exception:
            # Audit should not break main request flow.
            logger.exception("audit write failed for action=%s", event.action)
            return


def client_ip(request) -> Optional[str]:
    if request is None:
        return None
    xff = request.META.get("HTTP_X_FORWARDED_FOR")
    if xff:
        return xff.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")


def log_event(
    *,
    action: str,
    actor=None,
    object_type: str = "",
    object_id: str = "",
    level: str = "info",
    category: str = "system",
    ip_address: Optional[str] = None,
    metadata: Optional[dict] = None,
) -> None:
    event = AuditEvent(
        action=action,
        actor=actor,
        object_type=object_type,
        object_id=object_id,
        level=level,
        category=category,
        ip_address=ip_address,
        metadata=metadata,
    )
    AuditService().log(event)
