from __future__ import annotations

import json
import logging
from typing import Protocol

from .contracts import AuditEvent


class AuditBackend(Protocol):
    def write(self, event: AuditEvent) -> None:
        ...


class AccountsAuditBackend:
    """
    Primary backend.
    Writes to accounts.AuditLog.
    """

    def write(self, event: AuditEvent) -> None:
        from accounts.models import AuditLog

        actor = event.actor if getattr(event.actor, "is_authenticated", False) else None
        AuditLog.log(
            action=event.action,
            user=actor,
            object_type=event.object_type,
            object_id=event.object_id,
            level=event.level,
            category=event.category,
            ip_address=event.ip_address,
            metadata=event.metadata,
        )


class LoggingAuditBackend:
    """
    Secondary backend.
    Emits the event as one JSON line on the worknest.audit logger.
    """

    LEVELS = {
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
        "critical": logging.CRITICAL,
    }

    def __init__(self, logger_name: str = "worknest.audit") -> None:
        self.logger = logging.getLogger(logger_name)

    def write(self, event: AuditEvent) -> None:
        self.logger.log(
            self.LEVELS.get(event.level, logging.INFO),
            json.dumps(event.as_log_fields(), default=str, sort_keys=True),
        )


class NoopAuditBackend:
    def write(self, event: AuditEvent) -> None:  # pragma: no cover
        return None
