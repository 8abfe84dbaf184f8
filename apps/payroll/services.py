from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, time, timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from accounts.models import Role
from apps.attendance.services import attendance_stats, daily_update_stats, missed_meeting_stats
from apps.fines.models import CustomFine, CustomFineRecord, DailyTaskNA, FineControlSettings
from apps.fines.services import created_tasks_between
from apps.projects.models import Project
from apps.projects.services import eligible_lead_projects, projects_involving, projects_led_by
from apps.tasks.deadlines import local_datetime
from common.exceptions import NotFoundError, ValidationError
from common.identifiers import normalize_id

from .models import AdHocLedgerEntry, BonusFineRecord
from .rules import DEFAULT_BASE_AMOUNT, CompensationBreakdown, CompensationInputs, compute_breakdown
from .summary import summarize_signals


User = get_user_model()

DAYS_PER_MONTH = 30
PERIODS = tuple(BonusFineRecord.Period.values)
OVERRIDE_FIELDS = ("manual_bonus", "manual_fine", "admin_notes", "approved_by_core_team")


@dataclass(frozen=True)
class CollectedInputs:
    inputs: CompensationInputs
    start: datetime
    end: datetime
    daily_tasks_details: str = ""


@dataclass(frozen=True)
class CompensationResult:
    record: BonusFineRecord
    breakdown: CompensationBreakdown
    created: bool


@dataclass(frozen=True)
class RecalculateResult:
    created: int
    updated: int


def period_bounds(period: str, now: datetime) -> tuple[datetime, datetime]:
    """Monthly windows open on the 1st, weekly windows on the most recent Sunday."""
    today = timezone.localdate(now)
    if period == BonusFineRecord.Period.MONTHLY:
        first = today.replace(day=1)
    elif period == BonusFineRecord.Period.WEEKLY:
        # weekday(): Monday=0 .. Sunday=6
        first = today - timedelta(days=(today.weekday() + 1) % 7)
    else:
        raise ValidationError(f"Unknown period '{period}'.")
    return local_datetime(first, time(0, 0)), now


def _get_employee(employee_id):
    employee_id = normalize_id(employee_id, field="employee_id")
    employee = User.objects.select_related("role").filter(pk=employee_id).first()
    if employee is None:
        raise NotFoundError(f"Employee {employee_id} not found.")
    return employee


def provisional_daily_task_fine(employee, now: datetime, fine_settings=None) -> int:
    """Today's lead fine when the deadline has passed but the scheduler has not recorded it yet."""
    fine_settings = fine_settings or FineControlSettings.get_solo()
    today = timezone.localdate(now)
    deadline = local_datetime(
        today,
        time(fine_settings.daily_tasks_deadline_hour, fine_settings.daily_tasks_deadline_minute),
    )
    if now < deadline:
        return 0

    projects = list(eligible_lead_projects(employee.id))
    if not projects:
        return 0

    already_recorded = CustomFineRecord.objects.filter(
        employee=employee,
        criteria=CustomFine.Criteria.LEAD_NO_TASK_CREATED,
        date=today,
        manually_deleted=False,
    ).exists()
    if already_recorded:
        return 0
    if DailyTaskNA.objects.filter(employee=employee, project__in=projects, date=today).exists():
        return 0

    day_start = local_datetime(today, time(0, 0))
    if any(created_tasks_between(employee.id, project.id, day_start, deadline) for project in projects):
        return 0
    return fine_settings.missing_daily_tasks_fine


def collect_inputs(employee, period: str, now: datetime) -> CollectedInputs:
    start, end = period_bounds(period, now)
    first_day, last_day = timezone.localdate(start), timezone.localdate(end)
    window = {"date__gte": first_day, "date__lte": last_day}

    involved = projects_involving(employee.id)
    completed = involved.filter(status=Project.Status.COMPLETED)
    led = projects_led_by(employee.id)

    attendance = attendance_stats(user_id=employee.id, start=first_day, end=last_day)
    days_in_window = max(0, math.ceil((now - start) / timedelta(days=1)))

    updates = daily_update_stats(user_id=employee.id, start=first_day, end=last_day)
    meetings = missed_meeting_stats(user_id=employee.id, start=first_day, end=last_day)

    fine_settings = FineControlSettings.get_solo()
    recorded_daily_fines = (
        CustomFineRecord.objects.filter(
            employee=employee,
            criteria=CustomFine.Criteria.LEAD_NO_TASK_CREATED,
            manually_deleted=False,
            **window,
        ).aggregate(total=Sum("fine_currency"))["total"]
        or 0
    )
    provisional = provisional_daily_task_fine(employee, now, fine_settings)

    # Ledger fines backed by a lead fine record are already in missing_daily_tasks_fine.
    custom_fines = (
        AdHocLedgerEntry.objects.filter(
            employee=employee,
            kind=AdHocLedgerEntry.Kind.FINE,
            value_type=AdHocLedgerEntry.ValueType.CURRENCY,
            **window,
        )
        .exclude(custom_fine_record__criteria=CustomFine.Criteria.LEAD_NO_TASK_CREATED)
        .aggregate(total=Sum("value"))["total"]
        or 0
    )

    joined = timezone.localdate(employee.date_joined) if employee.date_joined else last_day
    months_worked = max(0, (last_day - joined).days) // DAYS_PER_MONTH

    details = ""
    deadline_label = f"{fine_settings.daily_tasks_deadline_hour:02d}:{fine_settings.daily_tasks_deadline_minute:02d}"
    if provisional:
        details = f"Deadline: {deadline_label} - Includes pending fine for today (will be applied automatically)"
    elif recorded_daily_fines:
        details = f"Deadline: {deadline_label} - Applied for days when no tasks were created before this time"

    inputs = CompensationInputs(
        products_count=completed.count(),
        approved_client_projects=completed.filter(client_progress=100).count(),
        attendance_hours=float(attendance.hours),
        absent_days=max(0, days_in_window - attendance.recorded_days),
        daily_updates_count=updates.total,
        loom_gform_count=updates.with_loom_and_gform,
        missing_daily_updates=max(0, days_in_window - updates.total),
        missed_team_meetings=meetings.team,
        missed_internal_meetings=meetings.internal,
        missed_client_meetings=meetings.client,
        is_project_lead=led.exists(),
        has_completed_as_lead=led.filter(status=Project.Status.COMPLETED).exists(),
        months_worked=months_worked,
        missing_daily_tasks_fine=recorded_daily_fines + provisional,
        custom_fines_currency=custom_fines,
    )
    return CollectedInputs(inputs=inputs, start=start, end=end, daily_tasks_details=details)


def _stored_inputs(record: BonusFineRecord) -> CompensationInputs:
    stored = dict((record.breakdown or {}).get("inputs") or {})
    stored.pop("is_in_training", None)
    known = CompensationInputs.__dataclass_fields__
    return CompensationInputs(**{key: value for key, value in stored.items() if key in known})


class CompensationService:
    RECORD_FIELDS = [
        "base_amount",
        "total_bonus",
        "total_fine",
        "grand_total_fine",
        "net_amount",
        "computed_at",
        "breakdown",
        "updated_at",
    ]

    @staticmethod
    def _record_key(employee, period: str, now: datetime) -> dict:
        today = timezone.localdate(now)
        return {"employee": employee, "period": period, "month": today.month, "year": today.year}

    @staticmethod
    def _breakdown_for(record: BonusFineRecord, inputs: CompensationInputs) -> CompensationBreakdown:
        return compute_breakdown(
            inputs,
            base_amount=getattr(settings, "COMPENSATION_BASE_AMOUNT", DEFAULT_BASE_AMOUNT),
            manual_bonus=record.manual_bonus,
            manual_fine=record.manual_fine,
            approved_by_core_team=record.approved_by_core_team,
        )

    @classmethod
    def _store(
        cls,
        record: BonusFineRecord,
        breakdown: CompensationBreakdown,
        now: datetime,
        extra: dict,
        also=(),
    ) -> None:
        record.base_amount = breakdown.base_amount
        record.total_bonus = breakdown.total_bonus
        record.total_fine = breakdown.total_fine
        record.grand_total_fine = breakdown.grand_total_fine
        record.net_amount = breakdown.net_amount
        record.computed_at = now
        record.breakdown = {**breakdown.as_dict(), **extra}
        record.save(update_fields=[*cls.RECORD_FIELDS, *also])

    @classmethod
    @transaction.atomic
    def compute_compensation(cls, employee_id, period: str, now: datetime) -> CompensationResult:
        if period not in PERIODS:
            raise ValidationError(f"Unknown period '{period}'.")
        employee = _get_employee(employee_id)
        collected = collect_inputs(employee, period, now)

        record, created = BonusFineRecord.objects.select_for_update().get_or_create(
            **cls._record_key(employee, period, now)
        )
        breakdown = cls._breakdown_for(record, collected.inputs)
        signals = summarize_signals(employee, collected.start, collected.end, now)
        cls._store(
            record,
            breakdown,
            now,
            {
                "inputs": collected.inputs.as_dict(),
                "window": {"start": collected.start.isoformat(), "end": collected.end.isoformat()},
                "missing_daily_tasks_fine_details": collected.daily_tasks_details,
                "signals": signals.totals,
            },
        )
        return CompensationResult(record=record, breakdown=breakdown, created=created)

    @classmethod
    def set_manual_override(cls, record_id, data: dict, now: datetime) -> CompensationResult:
        """
        Store admin overrides on a record and re-derive its totals.

        The record keeps the inputs collected for its own period, so the totals
        are rebuilt from those rather than from today's data. Negative overrides
        are rejected before anything is written.
        """
        record_id = normalize_id(record_id, field="record_id")
        for field in ("manual_bonus", "manual_fine"):
            value = data.get(field)
            if value is not None and value < 0:
                raise ValidationError(f"{field} cannot be negative.")

        with transaction.atomic():
            record = BonusFineRecord.objects.select_for_update().filter(pk=record_id).first()
            if record is None:
                raise NotFoundError(f"Compensation record {record_id} not found.")
            for field in OVERRIDE_FIELDS:
                if field in data:
                    setattr(record, field, data[field])

            breakdown = cls._breakdown_for(record, _stored_inputs(record))
            previous = {
                key: value
                for key, value in (record.breakdown or {}).items()
                if key in {"inputs", "window", "missing_daily_tasks_fine_details", "signals"}
            }
            cls._store(record, breakdown, now, previous, also=OVERRIDE_FIELDS)
        return CompensationResult(record=record, breakdown=breakdown, created=False)

    @classmethod
    def recalculate_all(cls, *, period: str, now: datetime) -> RecalculateResult:
        employees = User.objects.filter(is_active=True, role__name=Role.Name.EMPLOYEE).order_by("id")
        created = updated = 0
        for employee in employees:
            result = cls.compute_compensation(employee.id, period, now)
            if result.created:
                created += 1
            else:
                updated += 1
        return RecalculateResult(created=created, updated=updated)


class LedgerService:
    @staticmethod
    def create_entry(actor, data: dict) -> AdHocLedgerEntry:
        employee = _get_employee(data.get("employee"))
        value = data.get("value")
        if value is None or value <= 0:
            raise ValidationError("value must be a positive integer.")
        return AdHocLedgerEntry.objects.create(
            employee=employee,
            date=data["date"],
            kind=data["kind"],
            value_type=data["value_type"],
            value=value,
            description=data.get("description", ""),
            source=AdHocLedgerEntry.Source.MANUAL,
            created_by=actor,
        )
