from __future__ import annotations

from apps.audit import AuditEvents, client_ip, log_event


class PayrollAuditService:
    @classmethod
    def log_compensation_computed(cls, request, record) -> None:
        log_event(
            action=AuditEvents.COMPENSATION_COMPUTED,
            actor=getattr(request, "user", None),
            object_type="bonus_fine_record",
            object_id=str(record.id),
            category="payroll",
            ip_address=client_ip(request),
            metadata={
                "employee_id": record.employee_id,
                "period": record.period,
                "month": record.month,
                "year": record.year,
                "net_amount": record.net_amount,
            },
        )

    @classmethod
    def log_override_set(cls, request, record, changes: dict) -> None:
        log_event(
            action=AuditEvents.COMPENSATION_OVERRIDE_SET,
            actor=request.user,
            object_type="bonus_fine_record",
            object_id=str(record.id),
            level="warning",
            category="payroll",
            ip_address=client_ip(request),
            metadata={
                "employee_id": record.employee_id,
                "changes": {key: value for key, value in changes.items() if key != "admin_notes"},
                "total_bonus": record.total_bonus,
                "total_fine": record.total_fine,
                "net_amount": record.net_amount,
            },
        )

    @classmethod
    def log_recalculated(cls, request, period: str, created: int, updated: int) -> None:
        log_event(
            action=AuditEvents.COMPENSATION_RECALCULATED,
            actor=getattr(request, "user", None),
            object_type="compensation_period",
            object_id=period,
            category="payroll",
            ip_address=client_ip(request),
            metadata={"period": period, "records_created": created, "records_updated": updated},
        )

    @classmethod
    def log_ledger_entry(cls, request, entry) -> None:
        log_event(
            action=AuditEvents.LEDGER_ENTRY_CREATED,
            actor=request.user,
            object_type="ledger_entry",
            object_id=str(entry.id),
            category="payroll",
            ip_address=client_ip(request),
            metadata={
                "employee_id": entry.employee_id,
                "kind": entry.kind,
                "value_type": entry.value_type,
                "value": entry.value,
                "date": entry.date.isoformat(),
            },
        )
