"""Per-day points/currency earned and fined from every signal source."""

from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime

from django.db.models import Q
from django.utils import timezone

from apps.attendance.models import DailyUpdate
from apps.projects.models import Project
from apps.tasks.deadlines import is_after
from apps.tasks.models import Task, TaskCompletion
from apps.tasks.rewards import NEUTRAL, PENALTY, REWARD, TaskOutcome, determine_outcome, penalty_for

from .models import AdHocLedgerEntry, ChecklistItemConfig, HackathonPrize


SOURCES = ("tasks", "projects", "checklist", "hackathon", "ledger")
AMOUNTS = ("earned_points", "earned_currency", "fine_points", "fine_currency")

_SPACES = re.compile(r"\s+")


def normalize_label(text) -> str:
    return _SPACES.sub(" ", str(text or "").strip().lower())


def _empty_day() -> dict:
    return {source: dict.fromkeys(AMOUNTS, 0) for source in SOURCES}


@dataclass(frozen=True)
class SignalSummary:
    days: list
    totals: dict

    def as_dict(self) -> dict:
        return {"days": self.days, "totals": self.totals}


class _Collector:
    def __init__(self, start: date, end: date):
        self.start = start
        self.end = end
        self.rows = defaultdict(_empty_day)

    def in_window(self, day) -> bool:
        return day is not None and self.start <= day <= self.end

    def add(self, day, source: str, *, earned=(0, 0), fined=(0, 0)) -> None:
        if not self.in_window(day):
            return
        row = self.rows[day][source]
        row["earned_points"] += earned[0]
        row["earned_currency"] += earned[1]
        row["fine_points"] += fined[0]
        row["fine_currency"] += fined[1]

    def add_outcome(self, day, outcome: TaskOutcome) -> None:
        if outcome.kind == REWARD:
            self.add(day, "tasks", earned=(outcome.points, outcome.currency))
        elif outcome.kind == PENALTY:
            self.add(day, "tasks", fined=(outcome.points, outcome.currency))

    def summary(self) -> SignalSummary:
        days = []
        totals = _empty_day()
        for day in sorted(self.rows):
            sources = self.rows[day]
            day_totals = dict.fromkeys(AMOUNTS, 0)
            for source, amounts in sources.items():
                for key, value in amounts.items():
                    day_totals[key] += value
                    totals[source][key] += value
            days.append({"date": day.isoformat(), **day_totals, "sources": sources})
        overall = {key: sum(totals[source][key] for source in SOURCES) for key in AMOUNTS}
        return SignalSummary(days=days, totals={**overall, "sources": totals})


def _local_day(value):
    if value is None:
        return None
    if isinstance(value, datetime):
        return timezone.localdate(value)
    return value


def _task_day(task):
    return _local_day(task.ticked_at or task.completed_at or task.assigned_date or task.created_at)


def _completion_outcome(snapshot: TaskCompletion) -> TaskOutcome:
    if snapshot.approval_status in (Task.ApprovalStatus.REJECTED, Task.ApprovalStatus.DEADLINE_PASSED):
        return penalty_for(snapshot, reason=snapshot.approval_status)
    deadline = snapshot.effective_deadline
    if snapshot.status != Task.Status.COMPLETED:
        # The cycle was judged when it was archived.
        if is_after(snapshot.archived_at, deadline):
            return penalty_for(snapshot, reason="not_completed_deadline_passed")
        return TaskOutcome(kind=NEUTRAL, reason="not_completed")

    finished = snapshot.ticked_at or snapshot.completed_at or snapshot.archived_at
    if is_after(finished, deadline):
        return penalty_for(snapshot, reason="completed_late")
    if snapshot.bonus_points or snapshot.bonus_currency:
        return TaskOutcome(
            kind=REWARD,
            points=snapshot.bonus_points,
            currency=snapshot.bonus_currency,
            reason="completed_on_time",
        )
    return TaskOutcome(kind=NEUTRAL, reason="no_bonus_configured")


def _collect_tasks(collector: _Collector, employee, now: datetime) -> None:
    # Pending approvals have no outcome yet.
    tasks = Task.objects.filter(assignee=employee, not_applicable=False).exclude(
        approval_status=Task.ApprovalStatus.PENDING
    )
    for task in tasks:
        collector.add_outcome(_task_day(task), determine_outcome(task, now))

    snapshots = TaskCompletion.objects.filter(
        assignee=employee,
        cycle_date__gte=collector.start,
        cycle_date__lte=collector.end,
    ).exclude(approval_status=Task.ApprovalStatus.PENDING)
    for snapshot in snapshots:
        day = _local_day(snapshot.ticked_at or snapshot.completed_at) or snapshot.cycle_date
        collector.add_outcome(day, _completion_outcome(snapshot))


def _collect_projects(collector: _Collector, employee, now: datetime) -> None:
    projects = Project.objects.filter(lead_assignees=employee, assigned_at__isnull=False).distinct()
    for project in projects:
        day = _local_day(project.assigned_at)
        if project.status == Project.Status.COMPLETED:
            collector.add(day, "projects", earned=(project.bonus_points, project.bonus_currency))
        elif project.deadline and is_after(now, project.deadline):
            collector.add(day, "projects", fined=(project.penalty_points, project.penalty_currency))


def checklist_configs(employee) -> dict:
    """Active configs keyed by normalized label; the employee's own row wins over the global one."""
    configs = {}
    rows = ChecklistItemConfig.objects.filter(is_active=True).filter(Q(employee__isnull=True) | Q(employee=employee))
    for config in rows.order_by("employee_id"):
        key = normalize_label(config.label)
        if config.employee_id is not None or key not in configs:
            configs[key] = config
    return configs


def _collect_checklist(collector: _Collector, employee) -> None:
    configs = checklist_configs(employee)
    if not configs:
        return
    updates = DailyUpdate.objects.filter(
        employee=employee,
        admin_approved=True,
        date__gte=collector.start,
        date__lte=collector.end,
    )
    for update in updates:
        for item in update.checklist or []:
            if not isinstance(item, dict):
                continue
            config = configs.get(normalize_label(item.get("label")))
            if config is None:
                continue
            if item.get("checked"):
                collector.add(update.date, "checklist", earned=(config.bonus_points, config.bonus_currency))
            else:
                collector.add(update.date, "checklist", fined=(config.fine_points, config.fine_currency))


def _collect_hackathon(collector: _Collector, employee) -> None:
    for prize in HackathonPrize.objects.filter(winner=employee):
        collector.add(_local_day(prize.declared_at), "hackathon", earned=(prize.prize_points, prize.prize_currency))


def _collect_ledger(collector: _Collector, employee) -> None:
    entries = AdHocLedgerEntry.objects.filter(employee=employee, date__gte=collector.start, date__lte=collector.end)
    for entry in entries:
        amount = (entry.value, 0) if entry.value_type == AdHocLedgerEntry.ValueType.POINTS else (0, entry.value)
        if entry.kind == AdHocLedgerEntry.Kind.BONUS:
            collector.add(entry.date, "ledger", earned=amount)
        else:
            collector.add(entry.date, "ledger", fined=amount)


def summarize_signals(employee, start, end, now: datetime) -> SignalSummary:
    collector = _Collector(_local_day(start), _local_day(end))
    _collect_tasks(collector, employee, now)
    _collect_projects(collector, employee, now)
    _collect_checklist(collector, employee)
    _collect_hackathon(collector, employee)
    _collect_ledger(collector, employee)
    return collector.summary()
