from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Optional

from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from accounts.access_policy import AccessPolicy
from apps.payroll.models import AdHocLedgerEntry, BonusFineRecord
from apps.projects.models import Project
from apps.projects.services import eligible_lead_projects, is_lead_assignee
from apps.tasks.deadlines import END_OF_DAY, local_datetime
from apps.tasks.models import Task
from common.exceptions import AuthorizationError, NotFoundError, ValidationError
from common.identifiers import normalize_id

from .audit import FinesAuditService
from .models import CustomFine, CustomFineRecord, DailyTaskNA


logger = logging.getLogger(__name__)
User = get_user_model()

ALREADY_APPLIED = "already applied"


@dataclass(frozen=True)
class ApplyResult:
    applied: list = field(default_factory=list)
    skipped: list = field(default_factory=list)


def day_bounds(day) -> tuple[datetime, datetime]:
    return local_datetime(day, time(0, 0)), local_datetime(day, END_OF_DAY)


def created_tasks_between(employee_id: int, project_id: int, start: datetime, end: datetime) -> bool:
    return Task.objects.filter(
        project_id=project_id,
        created_by_id=employee_id,
        created_at__gte=start,
        created_at__lte=end,
    ).exists()


class CustomFineScheduler:
    @staticmethod
    def _skip(skipped: list, fine, reason: str, employee=None, project=None) -> None:
        entry = {"fine_id": fine.id, "employee_id": getattr(employee, "id", None), "reason": reason}
        if project is not None:
            entry["project_id"] = project.id
        skipped.append(entry)

    @staticmethod
    def _targets(fine):
        return list(fine.employees.select_related("role").order_by("id"))

    @classmethod
    def _apply_unit(cls, fine, employee, project, *, now: datetime, reason: str, applied: list, skipped: list) -> None:
        today = timezone.localdate(now)
        try:
            with transaction.atomic():
                record = CustomFineRecord.objects.create(
                    fine=fine,
                    employee=employee,
                    project=project,
                    date=today,
                    criteria=fine.criteria,
                    fine_type=fine.fine_type,
                    fine_points=fine.fine_points,
                    fine_currency=fine.fine_currency,
                    reason=reason,
                    applied_at=now,
                )
                for value_type, value in (
                    (AdHocLedgerEntry.ValueType.POINTS, fine.fine_points),
                    (AdHocLedgerEntry.ValueType.CURRENCY, fine.fine_currency),
                ):
                    if value > 0:
                        AdHocLedgerEntry.objects.create(
                            employee=employee,
                            date=today,
                            kind=AdHocLedgerEntry.Kind.FINE,
                            value_type=value_type,
                            value=value,
                            description=reason,
                            source=AdHocLedgerEntry.Source.CUSTOM_FINE,
                            custom_fine_record=record,
                        )
                BonusFineRecord.add_custom_fine(
                    employee_id=employee.id,
                    day=today,
                    points=fine.fine_points,
                    currency=fine.fine_currency,
                )
        except IntegrityError:
            # A concurrent run inserted the same natural key first.
            cls._skip(skipped, fine, ALREADY_APPLIED, employee, project)
            return
        except DatabaseError as exc:
            logger.exception("Custom fine %s failed for employee %s", fine.id, employee.id)
            cls._skip(skipped, fine, f"failed: {exc}", employee, project)
            return

        FinesAuditService.log_fine_applied(record)
        applied.append(
            {
                "fine_id": fine.id,
                "record_id": record.id,
                "employee_id": employee.id,
                "project_id": getattr(project, "id", None),
                "fine_points": record.fine_points,
                "fine_currency": record.fine_currency,
                "criteria": fine.criteria,
            }
        )

    @classmethod
    def _apply_default(cls, fine, now: datetime, applied: list, skipped: list) -> None:
        for employee in cls._targets(fine):
            if not AccessPolicy.is_employee(employee):
                cls._skip(skipped, fine, "Employee not found or not an employee", employee)
                continue
            exists = CustomFineRecord.objects.filter(
                fine=fine,
                employee=employee,
                project__isnull=True,
                manually_deleted=False,
            ).exists()
            if exists:
                cls._skip(skipped, fine, "Fine already applied", employee)
                continue
            cls._apply_unit(
                fine,
                employee,
                None,
                now=now,
                reason=fine.description or "Default fine applied",
                applied=applied,
                skipped=skipped,
            )

    @classmethod
    def _apply_lead_no_task(cls, fine, now: datetime, applied: list, skipped: list) -> None:
        if fine.time_hour is None or fine.time_minute is None:
            cls._skip(skipped, fine, "Missing deadline time configuration")
            return

        today = timezone.localdate(now)
        deadline = local_datetime(today, time(fine.time_hour, fine.time_minute))
        # Inclusive: the fine triggers at the deadline itself.
        if now < deadline:
            cls._skip(skipped, fine, f"Deadline not reached yet (deadline: {fine.deadline_label})")
            return

        day_start, day_end = day_bounds(today)
        selected_ids = list(fine.projects.values_list("id", flat=True))
        for employee in cls._targets(fine):
            if not AccessPolicy.is_employee(employee):
                cls._skip(skipped, fine, "Employee not found or not an employee", employee)
                continue

            projects = list(eligible_lead_projects(employee.id, selected_ids=selected_ids))
            if not projects:
                cls._skip(skipped, fine, "Not a lead assignee for any projects", employee)
                continue

            for project in projects:
                if DailyTaskNA.objects.filter(employee=employee, project=project, date=today).exists():
                    cls._skip(skipped, fine, "Marked as NA (Not Applicable) for today", employee, project)
                    continue

                existing = CustomFineRecord.objects.filter(
                    fine=fine,
                    employee=employee,
                    project=project,
                    manually_deleted=False,
                )
                if fine.fine_type == CustomFine.FineType.DAILY:
                    if existing.filter(date=today).exists():
                        cls._skip(skipped, fine, "Fine already applied today", employee, project)
                        continue
                elif existing.exists():
                    cls._skip(skipped, fine, "One-time fine already applied", employee, project)
                    continue

                if created_tasks_between(employee.id, project.id, day_start, day_end):
                    cls._skip(skipped, fine, "Tasks created today", employee, project)
                    continue

                cls._apply_unit(
                    fine,
                    employee,
                    project,
                    now=now,
                    reason=f'Failed to create tasks for "{project.name}" by {fine.deadline_label} on {today.isoformat()}',
                    applied=applied,
                    skipped=skipped,
                )

    @classmethod
    def apply_custom_fines(cls, *, now: datetime, fine_id=None) -> ApplyResult:
        if fine_id is not None:
            fine_id = normalize_id(fine_id, field="fine_id")
            fine = CustomFine.objects.filter(pk=fine_id).first()
            if fine is None:
                raise NotFoundError(f"Custom fine {fine_id} not found.")
            fines = [fine] if fine.is_active else []
        else:
            fines = list(CustomFine.objects.filter(is_active=True).order_by("id"))

        applied: list = []
        skipped: list = []
        for fine in fines:
            if fine.criteria == CustomFine.Criteria.DEFAULT_FINE:
                cls._apply_default(fine, now, applied, skipped)
            elif fine.criteria == CustomFine.Criteria.LEAD_NO_TASK_CREATED:
                cls._apply_lead_no_task(fine, now, applied, skipped)
            else:
                cls._skip(skipped, fine, f"Unknown criteria: {fine.criteria}")

        if skipped:
            logger.info("Custom fines run: %s applied, %s skipped", len(applied), len(skipped))
        return ApplyResult(applied=applied, skipped=skipped)


class CustomFineRecordService:
    @staticmethod
    @transaction.atomic
    def delete_record(record_id, actor, now: datetime) -> CustomFineRecord:
        record_id = normalize_id(record_id, field="record_id")
        record = CustomFineRecord.objects.select_for_update().filter(pk=record_id).first()
        if record is None:
            raise NotFoundError(f"Custom fine record {record_id} not found.")
        if record.manually_deleted:
            return record

        record.manually_deleted = True
        record.deleted_at = now
        record.deleted_by = actor
        record.save(update_fields=["manually_deleted", "deleted_at", "deleted_by"])
        record.ledger_entries.all().delete()
        BonusFineRecord.add_custom_fine(
            employee_id=record.employee_id,
            day=record.date,
            points=-record.fine_points,
            currency=-record.fine_currency,
        )
        return record


class DailyTaskNAService:
    @staticmethod
    def mark_na(employee, project_id, now: datetime) -> tuple[DailyTaskNA, bool]:
        project_id = normalize_id(project_id, field="project_id")
        if not Project.objects.filter(pk=project_id).exists():
            raise NotFoundError(f"Project {project_id} not found.")
        if not is_lead_assignee(employee.id, project_id):
            raise AuthorizationError("Only lead assignees can mark a project as not applicable.")
        return DailyTaskNA.objects.get_or_create(
            employee=employee,
            project_id=project_id,
            date=timezone.localdate(now),
        )


def validate_fine_definition(data: dict, instance: Optional[CustomFine] = None) -> dict:
    """Criteria-dependent rules for a fine definition."""
    criteria = data.get("criteria", getattr(instance, "criteria", None))
    if criteria == CustomFine.Criteria.LEAD_NO_TASK_CREATED:
        hour = data.get("time_hour", getattr(instance, "time_hour", None))
        minute = data.get("time_minute", getattr(instance, "time_minute", None))
        if hour is None or not 0 <= hour <= 23:
            raise ValidationError("Invalid hour. Must be between 0 and 23.")
        if minute is None or not 0 <= minute <= 59:
            raise ValidationError("Invalid minute. Must be between 0 and 59.")
        if data.get("fine_type", getattr(instance, "fine_type", None)) not in CustomFine.FineType.values:
            raise ValidationError('Fine type must be either "daily" or "one-time".')
    elif criteria == CustomFine.Criteria.DEFAULT_FINE:
        description = data.get("description", getattr(instance, "description", ""))
        if not (description or "").strip():
            raise ValidationError("Description is required for default fines.")
        # Default fines apply once per employee.
        data["fine_type"] = CustomFine.FineType.ONE_TIME
        data["projects"] = []
    else:
        raise ValidationError("Criteria is required.")
    return data
