"""Unified audit facade package."""

from .services import client_ip, log_event
from .events import AuditEvents

__all__ = ["client_ip", "log_event", "AuditEvents"]
