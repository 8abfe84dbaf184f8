"""
Deadline evaluation for tasks.

The effective deadline is resolved from the (deadline_date, deadline_time)
pair first and the (due_date, due_time) pair second:

- a time with a date is that exact instant;
- a time without a date only counts for recurring kinds and is anchored to the
  cycle's assigned date, or to today when there is none;
- a date without a time is the end of that day;
- nothing at all means the task has no deadline and is never late.

An instant is past the deadline only when it is strictly later. Completing a
task exactly at its deadline is on time.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional, Union

from django.utils import timezone


END_OF_DAY = time(23, 59, 59, 999999)
RECURRING_KINDS = frozenset({"daily", "weekly", "monthly", "custom"})

TimeLike = Union[time, str, None]


@dataclass(frozen=True)
class DeadlineStatus:
    is_past_deadline: bool
    effective_deadline: Optional[datetime]


def parse_time(value: TimeLike) -> Optional[time]:
    """Accept ``time`` objects and ``HH:MM`` / ``HH:MM:SS`` strings."""
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value
    parts = str(value).strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time value: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    second = int(parts[2]) if len(parts) == 3 else 0
    return time(hour, minute, second)


def local_datetime(day: date, at: Optional[time] = None) -> datetime:
    """Aware datetime for ``day`` at ``at`` in the current time zone; end of day when ``at`` is None."""
    naive = datetime.combine(day, at if at is not None else END_OF_DAY)
    return timezone.make_aware(naive, timezone.get_current_timezone())


def _resolve_pair(
    day: Optional[date],
    at: TimeLike,
    *,
    recurring: bool,
    anchor: date,
) -> Optional[datetime]:
    at = parse_time(at)
    if at is not None:
        if day is not None:
            return local_datetime(day, at)
        if recurring:
            return local_datetime(anchor, at)
        return None
    if day is not None:
        return local_datetime(day)
    return None


def effective_deadline(
    *,
    kind: str,
    today: date,
    deadline_date: Optional[date] = None,
    deadline_time: TimeLike = None,
    due_date: Optional[date] = None,
    due_time: TimeLike = None,
    assigned_date: Optional[date] = None,
) -> Optional[datetime]:
    recurring = kind in RECURRING_KINDS
    anchor = assigned_date or today

    deadline = _resolve_pair(deadline_date, deadline_time, recurring=recurring, anchor=anchor)
    if deadline is not None:
        return deadline
    return _resolve_pair(due_date, due_time, recurring=recurring, anchor=anchor)


def is_after(instant: Optional[datetime], deadline: Optional[datetime]) -> bool:
    if instant is None or deadline is None:
        return False
    return instant > deadline


def evaluate(*, now: datetime, kind: str, **fields) -> DeadlineStatus:
    deadline = effective_deadline(kind=kind, today=timezone.localdate(now), **fields)
    return DeadlineStatus(is_past_deadline=is_after(now, deadline), effective_deadline=deadline)


def task_deadline_fields(task) -> dict:
    # Recurring tasks anchor time-only deadlines on the current cycle.
    anchor = task.cycle_date if task.is_recurring and task.cycle_date else task.assigned_date
    return {
        "deadline_date": task.deadline_date,
        "deadline_time": task.deadline_time,
        "due_date": task.due_date,
        "due_time": task.due_time,
        "assigned_date": anchor,
    }


def evaluate_task(task, now: datetime) -> DeadlineStatus:
    return evaluate(now=now, kind=task.kind, **task_deadline_fields(task))


def missed_deadline(task, now: datetime) -> bool:
    """Whether a still-pending task should be auto-marked ``deadline_passed``.

    Completed tasks only qualify when they were completed after the deadline.
    """
    if task.approval_status != "pending" or task.not_applicable or task.status == "cancelled":
        return False
    status = evaluate_task(task, now)
    if not status.is_past_deadline:
        return False
    if task.status != "completed":
        return True
    return is_after(task.ticked_at or task.completed_at, status.effective_deadline)
