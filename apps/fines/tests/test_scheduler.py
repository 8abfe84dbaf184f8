from datetime import date, datetime

from django.db import IntegrityError, transaction
from django.test import TestCase
from django.utils import timezone

from accounts.models import Role, User
from apps.fines.models import CustomFine, CustomFineRecord, DailyTaskNA
from apps.fines.services import ALREADY_APPLIED, CustomFineRecordService, CustomFineScheduler, DailyTaskNAService
from apps.payroll.models import AdHocLedgerEntry, BonusFineRecord
from apps.projects.models import Project
from apps.tasks.models import Task
from common.exceptions import AuthorizationError, NotFoundError


def aware(*args):
    return timezone.make_aware(datetime(*args), timezone.get_current_timezone())


class CustomFineSchedulerTests(TestCase):
    def setUp(self):
        self.employee_role, _ = Role.objects.get_or_create(
            name=Role.Name.EMPLOYEE,
            defaults={"level": Role.Level.EMPLOYEE},
        )
        self.admin_role, _ = Role.objects.get_or_create(
            name=Role.Name.ADMIN,
            defaults={"level": Role.Level.ADMIN},
        )
        self.admin = User.objects.create_user(username="fine_admin", password="StrongPass123!", role=self.admin_role)
        self.lead = User.objects.create_user(username="fine_lead", password="StrongPass123!", role=self.employee_role)
        self.project = Project.objects.create(name="CRM", status=Project.Status.IN_PROGRESS)
        self.project.lead_assignees.add(self.lead)

        self.lead_fine = CustomFine.objects.create(
            criteria=CustomFine.Criteria.LEAD_NO_TASK_CREATED,
            fine_type=CustomFine.FineType.DAILY,
            fine_points=2,
            fine_currency=300,
            time_hour=10,
            time_minute=0,
        )
        self.lead_fine.employees.add(self.lead)

    def _records(self):
        return CustomFineRecord.objects.filter(manually_deleted=False)

    def test_lead_fine_waits_for_deadline_inclusive(self):
        early = CustomFineScheduler.apply_custom_fines(now=aware(2024, 3, 4, 9, 59))
        self.assertEqual(early.applied, [])
        self.assertIn("Deadline not reached", early.skipped[0]["reason"])
        self.assertFalse(self._records().exists())

        on_time = CustomFineScheduler.apply_custom_fines(now=aware(2024, 3, 4, 10, 0, 0))
        self.assertEqual(len(on_time.applied), 1)
        record = self._records().get()
        self.assertEqual(record.project_id, self.project.id)
        self.assertEqual(record.date, date(2024, 3, 4))

    def test_application_writes_ledger_and_monthly_aggregate(self):
        CustomFineScheduler.apply_custom_fines(now=aware(2024, 3, 4, 10, 30))

        entries = AdHocLedgerEntry.objects.filter(employee=self.lead, source=AdHocLedgerEntry.Source.CUSTOM_FINE)
        self.assertEqual(
            sorted(entries.values_list("value_type", "value")),
            [("currency", 300), ("points", 2)],
        )
        aggregate = BonusFineRecord.objects.get(employee=self.lead, period="monthly", month=3, year=2024)
        self.assertEqual(aggregate.custom_fines_points, 2)
        self.assertEqual(aggregate.custom_fines_currency, 300)

    def test_rerun_is_idempotent(self):
        now = aware(2024, 3, 4, 11, 0)
        CustomFineScheduler.apply_custom_fines(now=now)
        snapshot = list(self._records().values_list("fine_id", "employee_id", "project_id", "date"))

        again = CustomFineScheduler.apply_custom_fines(now=now)
        self.assertEqual(again.applied, [])
        self.assertEqual(again.skipped[0]["reason"], "Fine already applied today")
        self.assertEqual(list(self._records().values_list("fine_id", "employee_id", "project_id", "date")), snapshot)
        self.assertEqual(BonusFineRecord.objects.get(employee=self.lead).custom_fines_currency, 300)

    def test_daily_fine_applies_again_next_day(self):
        CustomFineScheduler.apply_custom_fines(now=aware(2024, 3, 4, 11, 0))
        CustomFineScheduler.apply_custom_fines(now=aware(2024, 3, 5, 11, 0))
        self.assertEqual(self._records().count(), 2)

    def test_one_time_lead_fine_applies_once(self):
        self.lead_fine.fine_type = CustomFine.FineType.ONE_TIME
        self.lead_fine.save()
        CustomFineScheduler.apply_custom_fines(now=aware(2024, 3, 4, 11, 0))
        result = CustomFineScheduler.apply_custom_fines(now=aware(2024, 3, 5, 11, 0))
        self.assertEqual(result.skipped[0]["reason"], "One-time fine already applied")
        self.assertEqual(self._records().count(), 1)

    def test_created_task_or_na_mark_skips_fine(self):
        Task.objects.create(
            title="Plan",
            project=self.project,
            assignee=self.lead,
            created_by=self.lead,
            created_at=aware(2024, 3, 4, 8, 15),
        )
        result = CustomFineScheduler.apply_custom_fines(now=aware(2024, 3, 4, 11, 0))
        self.assertEqual(result.skipped[0]["reason"], "Tasks created today")

        DailyTaskNA.objects.create(employee=self.lead, project=self.project, date=date(2024, 3, 5))
        result = CustomFineScheduler.apply_custom_fines(now=aware(2024, 3, 5, 11, 0))
        self.assertIn("Marked as NA", result.skipped[0]["reason"])
        self.assertFalse(self._records().exists())

    def test_completed_projects_are_ignored_unless_selected(self):
        self.project.status = Project.Status.COMPLETED
        self.project.save()
        result = CustomFineScheduler.apply_custom_fines(now=aware(2024, 3, 4, 11, 0))
        self.assertEqual(result.skipped[0]["reason"], "Not a lead assignee for any projects")

        self.lead_fine.projects.add(self.project)
        result = CustomFineScheduler.apply_custom_fines(now=aware(2024, 3, 4, 11, 0))
        self.assertEqual(len(result.applied), 1)

    def test_non_employee_targets_are_skipped(self):
        self.lead_fine.employees.add(self.admin)
        result = CustomFineScheduler.apply_custom_fines(now=aware(2024, 3, 4, 11, 0))
        reasons = {entry["employee_id"]: entry["reason"] for entry in result.skipped}
        self.assertEqual(reasons[self.admin.id], "Employee not found or not an employee")
        self.assertEqual(len(result.applied), 1)

    def test_default_fine_reapplies_after_manual_delete(self):
        default_fine = CustomFine.objects.create(
            criteria=CustomFine.Criteria.DEFAULT_FINE,
            description="Late for client demo",
            fine_currency=1000,
        )
        default_fine.employees.add(self.lead)
        now = aware(2024, 3, 4, 8, 0)

        first = CustomFineScheduler.apply_custom_fines(now=now, fine_id=default_fine.id)
        self.assertEqual(len(first.applied), 1)
        second = CustomFineScheduler.apply_custom_fines(now=now, fine_id=str(default_fine.id))
        self.assertEqual(second.skipped[0]["reason"], "Fine already applied")

        record = CustomFineRecord.objects.get(fine=default_fine)
        CustomFineRecordService.delete_record(record.id, self.admin, now)
        aggregate = BonusFineRecord.objects.get(employee=self.lead, month=3, year=2024)
        self.assertEqual(aggregate.custom_fines_currency, 0)
        self.assertFalse(AdHocLedgerEntry.objects.filter(custom_fine_record=record).exists())

        third = CustomFineScheduler.apply_custom_fines(now=now, fine_id=default_fine.id)
        self.assertEqual(len(third.applied), 1)
        self.assertEqual(CustomFineRecord.objects.filter(fine=default_fine, manually_deleted=False).count(), 1)
        self.assertEqual(CustomFineRecord.objects.filter(fine=default_fine).count(), 2)

    def test_database_rejects_duplicate_active_daily_record(self):
        fields = {
            "fine": self.lead_fine,
            "employee": self.lead,
            "project": self.project,
            "date": date(2024, 3, 4),
            "criteria": self.lead_fine.criteria,
            "fine_type": CustomFine.FineType.DAILY,
            "applied_at": aware(2024, 3, 4, 10, 0),
        }
        CustomFineRecord.objects.create(**fields)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                CustomFineRecord.objects.create(**fields)
        CustomFineRecord.objects.create(**{**fields, "manually_deleted": True})

    def test_racing_insert_is_reported_as_already_applied(self):
        now = aware(2024, 3, 4, 10, 0)
        CustomFineRecord.objects.create(
            fine=self.lead_fine,
            employee=self.lead,
            project=self.project,
            date=date(2024, 3, 4),
            criteria=self.lead_fine.criteria,
            fine_type=CustomFine.FineType.DAILY,
            applied_at=now,
        )
        applied, skipped = [], []
        CustomFineScheduler._apply_unit(
            self.lead_fine,
            self.lead,
            self.project,
            now=now,
            reason="race",
            applied=applied,
            skipped=skipped,
        )
        self.assertEqual(applied, [])
        self.assertEqual(skipped[0]["reason"], ALREADY_APPLIED)
        self.assertFalse(BonusFineRecord.objects.filter(employee=self.lead).exists())

    def test_unknown_fine_id(self):
        with self.assertRaises(NotFoundError):
            CustomFineScheduler.apply_custom_fines(now=aware(2024, 3, 4, 10, 0), fine_id=424242)

    def test_only_leads_can_mark_na(self):
        outsider = User.objects.create_user(username="fine_out", password="StrongPass123!", role=self.employee_role)
        with self.assertRaises(AuthorizationError):
            DailyTaskNAService.mark_na(outsider, self.project.id, aware(2024, 3, 4, 9, 0))

        mark, created = DailyTaskNAService.mark_na(self.lead, self.project.id, aware(2024, 3, 4, 9, 0))
        self.assertTrue(created)
        _, created_again = DailyTaskNAService.mark_na(self.lead, str(self.project.id), aware(2024, 3, 4, 17, 0))
        self.assertFalse(created_again)
        self.assertEqual(mark.date, date(2024, 3, 4))
