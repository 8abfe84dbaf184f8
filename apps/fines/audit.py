from __future__ import annotations

from apps.audit import AuditEvents, client_ip, log_event


class FinesAuditService:
    @classmethod
    def log_fine_saved(cls, request, fine, created: bool) -> None:
        log_event(
            action=AuditEvents.CUSTOM_FINE_CREATED if created else AuditEvents.CUSTOM_FINE_UPDATED,
            actor=request.user,
            object_type="custom_fine",
            object_id=str(fine.id),
            category="fines",
            ip_address=client_ip(request),
            metadata={
                "criteria": fine.criteria,
                "fine_type": fine.fine_type,
                "fine_points": fine.fine_points,
                "fine_currency": fine.fine_currency,
                "is_active": fine.is_active,
            },
        )

    @classmethod
    def log_fine_applied(cls, record) -> None:
        log_event(
            action=AuditEvents.CUSTOM_FINE_APPLIED,
            object_type="custom_fine_record",
            object_id=str(record.id),
            level="warning",
            category="fines",
            metadata={
                "fine_id": record.fine_id,
                "employee_id": record.employee_id,
                "project_id": record.project_id,
                "date": record.date.isoformat(),
                "fine_points": record.fine_points,
                "fine_currency": record.fine_currency,
            },
        )

    @classmethod
    def log_run(cls, request, result, fine_id=None) -> None:
        log_event(
            action=AuditEvents.CUSTOM_FINES_RUN,
            actor=getattr(request, "user", None),
            object_type="custom_fine",
            object_id=str(fine_id) if fine_id else "all",
            category="fines",
            ip_address=client_ip(request),
            metadata={"applied": len(result.applied), "skipped": len(result.skipped)},
        )

    @classmethod
    def log_record_deleted(cls, request, record) -> None:
        log_event(
            action=AuditEvents.CUSTOM_FINE_RECORD_DELETED,
            actor=request.user,
            object_type="custom_fine_record",
            object_id=str(record.id),
            category="fines",
            ip_address=client_ip(request),
            metadata={"employee_id": record.employee_id, "fine_currency": record.fine_currency},
        )

    @classmethod
    def log_na_marked(cls, request, mark) -> None:
        log_event(
            action=AuditEvents.DAILY_TASK_NA_MARKED,
            actor=request.user,
            object_type="daily_task_na",
            object_id=str(mark.id),
            category="fines",
            ip_address=client_ip(request),
            metadata={"project_id": mark.project_id, "date": mark.date.isoformat()},
        )
