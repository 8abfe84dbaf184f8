"""
Recurring task cycles.

A recurring task is one live row whose ``cycle_date`` marks the first day of
the cycle it currently tracks. When that cycle is over, the row is archived
into an immutable ``TaskCompletion`` and reset for the cycle that contains
today. The archive and the reset happen in one transaction.

Custom recurrence uses ``days_of_week`` (0 = Sunday .. 6 = Saturday) or
``days_of_month`` (1..31); every selected day is a cycle of its own.
"""

from __future__ import annotations

import logging
from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

import jsonschema
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from common.exceptions import ConcurrencyConflict, ValidationError

from .audit import TasksAuditService
from .deadlines import evaluate_task, missed_deadline
from .models import Subtask, Task, TaskCompletion


logger = logging.getLogger(__name__)

_DAY_LIST = {"type": "array", "uniqueItems": True}

RECURRENCE_SCHEMA = {
    "type": "object",
    "properties": {
        "days_of_week": {**_DAY_LIST, "items": {"type": "integer", "minimum": 0, "maximum": 6}},
        "days_of_month": {**_DAY_LIST, "items": {"type": "integer", "minimum": 1, "maximum": 31}},
    },
    "additionalProperties": False,
}

CUSTOM_RECURRENCE_SCHEMA = {
    "allOf": [
        RECURRENCE_SCHEMA,
        {
            "anyOf": [
                {"required": ["days_of_week"], "properties": {"days_of_week": {"minItems": 1}}},
                {"required": ["days_of_month"], "properties": {"days_of_month": {"minItems": 1}}},
            ]
        },
    ]
}

# A custom schedule always hits within a year; this bounds the forward search.
_SEARCH_HORIZON_DAYS = 366


def validate_recurrence(recurrence, kind: str) -> dict:
    recurrence = recurrence or {}
    schema = CUSTOM_RECURRENCE_SCHEMA if kind == Task.Kind.CUSTOM else RECURRENCE_SCHEMA
    try:
        jsonschema.validate(instance=recurrence, schema=schema)
    except jsonschema.exceptions.ValidationError as exc:
        raise ValidationError(f"Invalid recurrence: {exc.message}") from exc
    return recurrence


def _sunday_based_weekday(day: date) -> int:
    return (day.weekday() + 1) % 7


def _is_scheduled(day: date, recurrence: dict) -> bool:
    if _sunday_based_weekday(day) in (recurrence.get("days_of_week") or []):
        return True
    return day.day in (recurrence.get("days_of_month") or [])


def cycle_start_for(kind: str, recurrence: Optional[dict], day: date) -> date:
    """First day of the cycle that contains ``day`` (custom: the next scheduled day)."""
    if kind == Task.Kind.DAILY:
        return day
    if kind == Task.Kind.WEEKLY:
        return day - timedelta(days=_sunday_based_weekday(day))
    if kind == Task.Kind.MONTHLY:
        return day.replace(day=1)
    if kind == Task.Kind.CUSTOM:
        recurrence = recurrence or {}
        for offset in range(_SEARCH_HORIZON_DAYS):
            candidate = day + timedelta(days=offset)
            if _is_scheduled(candidate, recurrence):
                return candidate
        raise ValidationError("Custom recurrence never matches a calendar day.")
    raise ValidationError(f"'{kind}' tasks do not recur.")


def cycle_window(kind: str, cycle_date: date) -> tuple[date, date]:
    if kind == Task.Kind.WEEKLY:
        start = cycle_date - timedelta(days=_sunday_based_weekday(cycle_date))
        return start, start + timedelta(days=6)
    if kind == Task.Kind.MONTHLY:
        start = cycle_date.replace(day=1)
        return start, start.replace(day=monthrange(start.year, start.month)[1])
    return cycle_date, cycle_date


def is_cycle_closed(task, now: datetime) -> bool:
    if not task.is_recurring or task.cycle_date is None:
        return False
    _, last_day = cycle_window(task.kind, task.cycle_date)
    return timezone.localdate(now) > last_day


@dataclass(frozen=True)
class ArchiveResult:
    archived: int
    reset: int
    skipped: int


class RecurrenceArchiver:
    @staticmethod
    def _snapshot_defaults(task, now: datetime) -> dict:
        approval_status = task.approval_status
        if missed_deadline(task, now):
            approval_status = Task.ApprovalStatus.DEADLINE_PASSED
        return {
            "title": task.title,
            "kind": task.kind,
            "project_id": task.project_id,
            "assignee_id": task.assignee_id,
            "status": task.status,
            "approval_status": approval_status,
            "effective_deadline": evaluate_task(task, now).effective_deadline,
            "completed_at": task.completed_at,
            "completed_by_id": task.completed_by_id,
            "ticked_at": task.ticked_at,
            "approved_by_id": task.approved_by_id,
            "approved_at": task.approved_at,
            "bonus_points": task.bonus_points,
            "bonus_currency": task.bonus_currency,
            "penalty_points": task.penalty_points,
            "penalty_currency": task.penalty_currency,
            "archived_at": now,
        }

    @classmethod
    @transaction.atomic
    def close_cycle(cls, task, now: datetime) -> TaskCompletion:
        completion, created = TaskCompletion.objects.get_or_create(
            task=task,
            cycle_date=task.cycle_date,
            defaults=cls._snapshot_defaults(task, now),
        )

        next_cycle = cycle_start_for(task.kind, task.recurrence, timezone.localdate(now))
        reset = Task.objects.filter(pk=task.pk, version=task.version).update(
            status=Task.Status.PENDING,
            approval_status=Task.ApprovalStatus.PENDING,
            completed_at=None,
            completed_by=None,
            ticked_at=None,
            approved_by=None,
            approved_at=None,
            cycle_date=next_cycle,
            version=F("version") + 1,
            updated_at=now,
        )
        if not reset:
            # Rolls the snapshot back with the failed reset.
            raise ConcurrencyConflict()
        Subtask.objects.filter(task_id=task.pk).update(status=Subtask.Status.PENDING)

        if created:
            TasksAuditService.log_cycle_archived(completion)
        return completion

    @classmethod
    def archive_closed_cycles(cls, *, now: datetime, kind: Optional[str] = None) -> ArchiveResult:
        queryset = Task.objects.filter(kind__in=Task.RECURRING_KINDS).exclude(cycle_date__isnull=True)
        if kind:
            if kind not in Task.RECURRING_KINDS:
                raise ValidationError(f"'{kind}' is not a recurring task kind.")
            queryset = queryset.filter(kind=kind)

        archived = reset = skipped = 0
        for task in queryset.order_by("id").iterator():
            if not is_cycle_closed(task, now):
                continue
            already_archived = TaskCompletion.objects.filter(task=task, cycle_date=task.cycle_date).exists()
            try:
                cls.close_cycle(task, now)
            except (ConcurrencyConflict, ValidationError) as exc:
                skipped += 1
                logger.warning("Recurring task %s was not reset: %s", task.pk, exc)
                continue
            if not already_archived:
                archived += 1
            reset += 1

        return ArchiveResult(archived=archived, reset=reset, skipped=skipped)
