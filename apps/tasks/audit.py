from __future__ import annotations

from typing import Optional

from apps.audit import AuditEvents, client_ip, log_event


TRANSITION_EVENTS = {
    "tick": AuditEvents.TASK_TICKED,
    "untick": AuditEvents.TASK_UNTICKED,
    "approve": AuditEvents.TASK_APPROVED,
    "reject": AuditEvents.TASK_REJECTED,
}


class TasksAuditService:
    @staticmethod
    def _actor(request, actor=None):
        if actor is not None:
            return actor
        return getattr(request, "user", None)

    @classmethod
    def log_task_created(cls, request, task) -> None:
        actor = cls._actor(request)
        log_event(
            action=AuditEvents.TASK_CREATED,
            actor=actor,
            object_type="task",
            object_id=str(task.id),
            level="info",
            category="tasks",
            ip_address=client_ip(request),
            metadata={
                "actor_id": getattr(actor, "id", None),
                "assignee_id": task.assignee_id,
                "project_id": task.project_id,
                "kind": task.kind,
            },
        )

    @classmethod
    def log_task_updated(cls, request, task, changed_fields: list[str]) -> None:
        actor = cls._actor(request)
        log_event(
            action=AuditEvents.TASK_UPDATED,
            actor=actor,
            object_type="task",
            object_id=str(task.id),
            level="info",
            category="tasks",
            ip_address=client_ip(request),
            metadata={
                "actor_id": getattr(actor, "id", None),
                "changed_fields": changed_fields,
                "version": task.version,
            },
        )

    @classmethod
    def log_update_denied(cls, request, task_id: int, field: Optional[str]) -> None:
        actor = cls._actor(request)
        log_event(
            action=AuditEvents.TASK_UPDATE_DENIED,
            actor=actor,
            object_type="task",
            object_id=str(task_id),
            level="warning",
            category="tasks",
            ip_address=client_ip(request),
            metadata={"actor_id": getattr(actor, "id", None), "field": field},
        )

    @classmethod
    def log_transition(cls, request, task, action: str, outcome=None) -> None:
        actor = cls._actor(request)
        metadata = {
            "actor_id": getattr(actor, "id", None),
            "status": task.status,
            "approval_status": task.approval_status,
        }
        if outcome is not None:
            metadata["outcome"] = outcome.as_dict()
        log_event(
            action=TRANSITION_EVENTS[action],
            actor=actor,
            object_type="task",
            object_id=str(task.id),
            level="info",
            category="tasks",
            ip_address=client_ip(request),
            metadata=metadata,
        )

    @classmethod
    def log_deadline_passed(cls, task) -> None:
        log_event(
            action=AuditEvents.TASK_DEADLINE_PASSED,
            object_type="task",
            object_id=str(task.id),
            level="warning",
            category="tasks",
            metadata={"assignee_id": task.assignee_id, "kind": task.kind},
        )

    @classmethod
    def log_save_conflict(cls, task_id: int, attempts: int) -> None:
        log_event(
            action=AuditEvents.TASK_SAVE_CONFLICT,
            object_type="task",
            object_id=str(task_id),
            level="warning",
            category="tasks",
            metadata={"attempts": attempts},
        )

    @classmethod
    def log_cycle_archived(cls, completion) -> None:
        log_event(
            action=AuditEvents.TASK_CYCLE_ARCHIVED,
            object_type="task",
            object_id=str(completion.task_id),
            level="info",
            category="tasks",
            metadata={
                "completion_id": completion.id,
                "cycle_date": completion.cycle_date.isoformat(),
                "approval_status": completion.approval_status,
            },
        )

    @classmethod
    def log_deadline_sweep(cls, request, marked: int) -> None:
        log_event(
            action=AuditEvents.TASK_DEADLINE_SWEEP_RUN,
            actor=cls._actor(request),
            object_type="task_sweep",
            level="info",
            category="tasks",
            ip_address=client_ip(request),
            metadata={"marked": marked},
        )

    @classmethod
    def log_recurrence_run(cls, request, kind: Optional[str], result) -> None:
        log_event(
            action=AuditEvents.TASK_RECURRENCE_RESET_RUN,
            actor=cls._actor(request),
            object_type="task_recurrence",
            object_id=kind or "all",
            level="info",
            category="tasks",
            ip_address=client_ip(request),
            metadata={"archived": result.archived, "reset": result.reset, "skipped": result.skipped},
        )
