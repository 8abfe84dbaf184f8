from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from apps.projects.models import Project
from common.exceptions import AuthorizationError, ConcurrencyConflict, NotFoundError, ValidationError
from common.identifiers import normalize_id

from .audit import TasksAuditService
from .deadlines import missed_deadline, parse_time
from .models import Subtask, Task
from .policies import TaskPolicy
from .recurrence import cycle_start_for, validate_recurrence
from .rewards import TaskOutcome, determine_outcome


logger = logging.getLogger(__name__)
User = get_user_model()

ACTIONS = ("tick", "untick", "approve", "reject")

EDITABLE_FIELDS = (
    "title",
    "description",
    "kind",
    "project",
    "assignee",
    "assigned_date",
    "assigned_time",
    "due_date",
    "due_time",
    "deadline_date",
    "deadline_time",
    "recurrence",
    "not_applicable",
) + Task.REWARD_FIELDS

LIFECYCLE_FIELDS = (
    "status",
    "approval_status",
    "completed_at",
    "completed_by",
    "ticked_at",
    "approved_by",
    "approved_at",
)

TIME_FIELDS = ("assigned_time", "due_time", "deadline_time")


@dataclass(frozen=True)
class TransitionResult:
    task: Task
    outcome: Optional[TaskOutcome] = None


@dataclass(frozen=True)
class UpdateResult:
    task: Task
    changed_fields: list = field(default_factory=list)


def _get_user(user_id, *, field_name: str):
    user_id = normalize_id(user_id, field=field_name)
    user = User.objects.filter(pk=user_id).first()
    if user is None:
        raise NotFoundError(f"User {user_id} not found.")
    return user


def _get_project(project_id):
    if project_id in (None, ""):
        return None
    project_id = normalize_id(project_id, field="project")
    project = Project.objects.filter(pk=project_id).first()
    if project is None:
        raise NotFoundError(f"Project {project_id} not found.")
    return project


class TaskLifecycleService:
    @staticmethod
    def max_attempts() -> int:
        return max(1, int(getattr(settings, "TASK_SAVE_MAX_ATTEMPTS", 3)))

    @staticmethod
    def get_task(task_id) -> Task:
        task_id = normalize_id(task_id, field="task_id")
        task = Task.objects.select_related("project", "assignee").filter(pk=task_id).first()
        if task is None:
            raise NotFoundError(f"Task {task_id} not found.")
        return task

    @staticmethod
    def _conditional_update(task: Task, changes: dict, now: datetime) -> int:
        return Task.objects.filter(pk=task.pk, version=task.version).update(
            **changes,
            version=F("version") + 1,
            updated_at=now,
        )

    @classmethod
    def save_with_retry(cls, task_id, mutate: Callable[[Task], Optional[dict]], *, now: datetime) -> Task:
        """
        Load the task, let ``mutate`` compute the changes and write them only if
        nobody bumped ``version`` in between. ``mutate`` runs again on every
        attempt, against the freshly loaded row, so its checks always see the
        current state. Returning nothing from ``mutate`` means "no write".
        """
        attempts = cls.max_attempts()
        for attempt in range(1, attempts + 1):
            task = cls.get_task(task_id)
            changes = mutate(task)
            if not changes:
                return task
            if cls._conditional_update(task, changes, now):
                task.refresh_from_db()
                return task
            logger.info("Task %s version %s is stale (attempt %s/%s)", task.pk, task.version, attempt, attempts)

        logger.warning("Giving up on task %s after %s attempts", task_id, attempts)
        TasksAuditService.log_save_conflict(normalize_id(task_id, field="task_id"), attempts)
        raise ConcurrencyConflict()

    # Transitions

    @classmethod
    def tick(cls, task, actor, now: datetime) -> Task:
        def mutate(current: Task) -> dict:
            if not TaskPolicy.can_tick(actor, current):
                raise AuthorizationError("You cannot complete this task.")
            if current.status == Task.Status.CANCELLED:
                raise ValidationError("Cancelled tasks cannot be completed.")
            if current.subtasks.exclude(status=Subtask.Status.COMPLETED).exists():
                raise ValidationError("Complete all subtasks before ticking the task.")
            return {
                "status": Task.Status.COMPLETED,
                "completed_at": now,
                "completed_by": actor,
                "ticked_at": now,
                "approval_status": Task.ApprovalStatus.PENDING,
                "approved_by": None,
                "approved_at": None,
            }

        return cls.save_with_retry(normalize_id(task, field="task_id"), mutate, now=now)

    @classmethod
    def untick(cls, task, actor, now: datetime) -> Task:
        def mutate(current: Task) -> dict:
            if not TaskPolicy.can_review(actor):
                raise AuthorizationError("Only admins can untick tasks.")
            return {
                "status": Task.Status.PENDING,
                "completed_at": None,
                "completed_by": None,
                "ticked_at": None,
                "approval_status": Task.ApprovalStatus.PENDING,
                "approved_by": None,
                "approved_at": None,
            }

        return cls.save_with_retry(normalize_id(task, field="task_id"), mutate, now=now)

    @staticmethod
    def _check_reviewable(actor, current: Task) -> None:
        if not TaskPolicy.can_review(actor):
            raise AuthorizationError("Only admins can review tasks.")
        if current.approval_status == Task.ApprovalStatus.DEADLINE_PASSED:
            raise ValidationError("The task missed its deadline and can no longer be reviewed.")
        if current.approval_status != Task.ApprovalStatus.PENDING:
            raise ValidationError(f"Task is already {current.approval_status}.")

    @classmethod
    def approve(cls, task, actor, now: datetime) -> TransitionResult:
        def mutate(current: Task) -> dict:
            cls._check_reviewable(actor, current)
            return {
                "approval_status": Task.ApprovalStatus.APPROVED,
                "approved_by": actor,
                "approved_at": now,
            }

        approved = cls.save_with_retry(normalize_id(task, field="task_id"), mutate, now=now)
        return TransitionResult(task=approved, outcome=determine_outcome(approved, now))

    @classmethod
    def reject(cls, task, actor, now: datetime) -> TransitionResult:
        def mutate(current: Task) -> dict:
            cls._check_reviewable(actor, current)
            return {
                "approval_status": Task.ApprovalStatus.REJECTED,
                "approved_by": actor,
                "approved_at": now,
            }

        rejected = cls.save_with_retry(normalize_id(task, field="task_id"), mutate, now=now)
        return TransitionResult(task=rejected, outcome=determine_outcome(rejected, now))

    @classmethod
    def auto_mark_deadline_passed(cls, task, now: datetime) -> bool:
        marked = []

        def mutate(current: Task) -> Optional[dict]:
            if not missed_deadline(current, now):
                return None
            marked.append(current.pk)
            changes = {"approval_status": Task.ApprovalStatus.DEADLINE_PASSED}
            if not current.is_completed:
                changes["status"] = Task.Status.OVERDUE
            return changes

        updated = cls.save_with_retry(normalize_id(task, field="task_id"), mutate, now=now)
        if marked and updated.approval_status == Task.ApprovalStatus.DEADLINE_PASSED:
            TasksAuditService.log_deadline_passed(updated)
            return True
        return False

    @classmethod
    def sweep_deadlines(cls, now: datetime) -> int:
        pending = (
            Task.objects.filter(approval_status=Task.ApprovalStatus.PENDING, not_applicable=False)
            .exclude(status=Task.Status.CANCELLED)
            .order_by("id")
        )
        marked = 0
        for task in pending.iterator():
            if not missed_deadline(task, now):
                continue
            try:
                if cls.auto_mark_deadline_passed(task.pk, now):
                    marked += 1
            except ConcurrencyConflict:
                logger.warning("Deadline sweep skipped task %s after repeated conflicts", task.pk)
        return marked

    @classmethod
    def transition_task(cls, task_id, action: str, actor, now: datetime) -> TransitionResult:
        task_id = normalize_id(task_id, field="task_id")
        if action not in ACTIONS:
            raise ValidationError(f"Unknown action '{action}'. Expected one of: {', '.join(ACTIONS)}.")
        if action == "tick":
            return TransitionResult(task=cls.tick(task_id, actor, now))
        if action == "untick":
            return TransitionResult(task=cls.untick(task_id, actor, now))
        if action == "approve":
            return cls.approve(task_id, actor, now)
        return cls.reject(task_id, actor, now)

    # Create / edit

    @staticmethod
    def _clean_changes(changes: dict) -> dict:
        locked = sorted(set(changes) & set(LIFECYCLE_FIELDS))
        if locked:
            raise ValidationError(f"{', '.join(locked)} change only through tick, untick, approve or reject.")
        unknown = sorted(set(changes) - set(EDITABLE_FIELDS))
        if unknown:
            raise ValidationError(f"Unknown or read-only fields: {', '.join(unknown)}.")
        cleaned = dict(changes)
        for name in TIME_FIELDS:
            if name in cleaned:
                try:
                    cleaned[name] = parse_time(cleaned[name])
                except ValueError as exc:
                    raise ValidationError(str(exc)) from exc
        for name in Task.REWARD_FIELDS:
            if name in cleaned and (cleaned[name] is None or int(cleaned[name]) < 0):
                raise ValidationError(f"{name} must be a non-negative integer.")
        if "project" in cleaned:
            cleaned["project"] = _get_project(cleaned["project"])
        if "assignee" in cleaned:
            cleaned["assignee"] = _get_user(cleaned["assignee"], field_name="assignee")
        return cleaned

    @classmethod
    @transaction.atomic
    def create_task(cls, actor, data: dict, now: datetime) -> Task:
        if not actor or not actor.is_authenticated:
            raise AuthorizationError()
        cleaned = cls._clean_changes(data)
        if not cleaned.get("title"):
            raise ValidationError("title is required.")
        assignee = cleaned.get("assignee")
        if assignee is None:
            raise ValidationError("assignee is required.")
        project = cleaned.get("project")

        TaskPolicy.check_reward_fields(actor, cleaned)
        if not TaskPolicy.can_create_for(actor, assignee, getattr(project, "id", None)):
            raise AuthorizationError("You cannot create tasks for this employee.")

        kind = cleaned.get("kind", Task.Kind.ONE_TIME)
        if kind not in Task.Kind.values:
            raise ValidationError(f"Unknown task kind '{kind}'.")
        cleaned["recurrence"] = validate_recurrence(cleaned.get("recurrence"), kind)

        task = Task(created_by=actor, created_at=now, **cleaned)
        if task.is_recurring:
            task.cycle_date = cycle_start_for(kind, task.recurrence, timezone.localdate(now))
        task.save()
        return task

    @classmethod
    def update_task(cls, task_id, actor, changes: dict, now: datetime) -> UpdateResult:
        task_id = normalize_id(task_id, field="task_id")
        cleaned = cls._clean_changes(changes)
        changed_fields: list[str] = []

        def mutate(current: Task) -> Optional[dict]:
            TaskPolicy.check_edit(actor, current, cleaned)
            if "project" in cleaned and not TaskPolicy.is_admin_like(actor):
                target = cleaned["project"]
                if target is not None and not TaskPolicy.is_project_lead(actor, target.id) and not TaskPolicy.is_owner(actor, current):
                    raise AuthorizationError("You cannot move this task to that project.")

            kind = cleaned.get("kind", current.kind)
            if kind not in Task.Kind.values:
                raise ValidationError(f"Unknown task kind '{kind}'.")
            recurrence = cleaned.get("recurrence", current.recurrence)
            if "kind" in cleaned or "recurrence" in cleaned:
                recurrence = validate_recurrence(recurrence, kind)

            updates = {}
            for name, value in cleaned.items():
                if name == "recurrence":
                    value = recurrence
                current_value = getattr(current, name)
                if current_value != value:
                    updates[name] = value
            if kind in Task.RECURRING_KINDS and ("kind" in updates or "recurrence" in updates or current.cycle_date is None):
                updates["cycle_date"] = cycle_start_for(kind, recurrence, timezone.localdate(now))
            elif kind not in Task.RECURRING_KINDS and current.cycle_date is not None:
                updates["cycle_date"] = None

            changed_fields[:] = sorted(updates)
            return updates

        task = cls.save_with_retry(task_id, mutate, now=now)
        return UpdateResult(task=task, changed_fields=list(changed_fields))
