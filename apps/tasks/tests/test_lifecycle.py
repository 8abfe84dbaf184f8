from datetime import date, datetime, time
from unittest.mock import patch

from django.test import TestCase
from django.utils import timezone

from accounts.models import Role, User
from apps.projects.models import Project
from apps.tasks.models import Subtask, Task
from apps.tasks.rewards import PENALTY, REWARD
from apps.tasks.services import TaskLifecycleService
from common.exceptions import AuthorizationError, ConcurrencyConflict, NotFoundError, ValidationError


def aware(*args):
    return timezone.make_aware(datetime(*args), timezone.get_current_timezone())


class TaskLifecycleTests(TestCase):
    def setUp(self):
        self.employee_role, _ = Role.objects.get_or_create(
            name=Role.Name.EMPLOYEE,
            defaults={"level": Role.Level.EMPLOYEE},
        )
        self.admin_role, _ = Role.objects.get_or_create(
            name=Role.Name.ADMIN,
            defaults={"level": Role.Level.ADMIN},
        )
        self.admin = User.objects.create_user(username="task_admin", password="StrongPass123!", role=self.admin_role)
        self.lead = User.objects.create_user(username="task_lead", password="StrongPass123!", role=self.employee_role)
        self.employee = User.objects.create_user(
            username="task_employee",
            password="StrongPass123!",
            role=self.employee_role,
        )
        self.outsider = User.objects.create_user(
            username="task_outsider",
            password="StrongPass123!",
            role=self.employee_role,
        )
        self.project = Project.objects.create(name="Website")
        self.project.lead_assignees.add(self.lead)
        self.task = Task.objects.create(
            title="Write report",
            project=self.project,
            assignee=self.employee,
            created_by=self.lead,
            deadline_date=date(2024, 1, 10),
            deadline_time=time(15, 0),
            bonus_points=50,
            bonus_currency=200,
            penalty_points=20,
        )
        self.now = aware(2024, 1, 10, 12, 0)

    def test_tick_sets_completion_fields_and_bumps_version(self):
        task = TaskLifecycleService.tick(self.task.id, self.employee, self.now)
        self.assertEqual(task.status, Task.Status.COMPLETED)
        self.assertEqual(task.completed_by_id, self.employee.id)
        self.assertEqual(task.ticked_at, self.now)
        self.assertEqual(task.approval_status, Task.ApprovalStatus.PENDING)
        self.assertEqual(task.version, 2)

    def test_tick_requires_completed_subtasks(self):
        Subtask.objects.create(task=self.task, title="Draft")
        with self.assertRaises(ValidationError):
            TaskLifecycleService.tick(self.task, self.employee, self.now)
        self.task.refresh_from_db()
        self.assertEqual(self.task.status, Task.Status.PENDING)

    def test_outsider_cannot_tick(self):
        with self.assertRaises(AuthorizationError):
            TaskLifecycleService.tick(self.task, self.outsider, self.now)

    def test_lead_assignee_can_tick_project_task(self):
        task = TaskLifecycleService.tick(str(self.task.id), self.lead, self.now)
        self.assertEqual(task.completed_by_id, self.lead.id)

    def test_approve_on_time_returns_reward(self):
        TaskLifecycleService.tick(self.task, self.employee, aware(2024, 1, 10, 15, 0))
        result = TaskLifecycleService.approve(self.task, self.admin, aware(2024, 1, 11, 9, 0))
        self.assertEqual(result.task.approval_status, Task.ApprovalStatus.APPROVED)
        self.assertEqual(result.task.approved_by_id, self.admin.id)
        self.assertEqual(result.outcome.kind, REWARD)
        self.assertEqual(result.outcome.currency, 200)

    def test_reject_never_rewards(self):
        TaskLifecycleService.tick(self.task, self.employee, self.now)
        result = TaskLifecycleService.reject(self.task, self.admin, self.now)
        self.assertEqual(result.task.approval_status, Task.ApprovalStatus.REJECTED)
        self.assertEqual(result.outcome.kind, PENALTY)
        self.assertEqual(result.outcome.currency, 20)

    def test_non_admin_cannot_approve(self):
        TaskLifecycleService.tick(self.task, self.employee, self.now)
        with self.assertRaises(AuthorizationError):
            TaskLifecycleService.approve(self.task, self.lead, self.now)

    def test_resolved_task_cannot_be_reviewed_again(self):
        TaskLifecycleService.tick(self.task, self.employee, self.now)
        TaskLifecycleService.approve(self.task, self.admin, self.now)
        with self.assertRaises(ValidationError):
            TaskLifecycleService.reject(self.task, self.admin, self.now)

    def test_deadline_passed_cannot_be_approved_until_reticked(self):
        late = aware(2024, 1, 10, 16, 0)
        self.assertTrue(TaskLifecycleService.auto_mark_deadline_passed(self.task, late))
        self.task.refresh_from_db()
        self.assertEqual(self.task.approval_status, Task.ApprovalStatus.DEADLINE_PASSED)
        self.assertEqual(self.task.status, Task.Status.OVERDUE)

        with self.assertRaises(ValidationError):
            TaskLifecycleService.approve(self.task, self.admin, late)

        # Re-tick is the explicit way back to pending.
        task = TaskLifecycleService.tick(self.task, self.employee, late)
        self.assertEqual(task.approval_status, Task.ApprovalStatus.PENDING)

    def test_auto_mark_is_idempotent_and_respects_resolved_status(self):
        TaskLifecycleService.tick(self.task, self.employee, self.now)
        TaskLifecycleService.approve(self.task, self.admin, self.now)
        self.assertFalse(TaskLifecycleService.auto_mark_deadline_passed(self.task, aware(2024, 1, 12, 0, 0)))
        self.task.refresh_from_db()
        self.assertEqual(self.task.approval_status, Task.ApprovalStatus.APPROVED)

    def test_completed_on_time_is_not_marked(self):
        TaskLifecycleService.tick(self.task, self.employee, self.now)
        self.assertFalse(TaskLifecycleService.auto_mark_deadline_passed(self.task, aware(2024, 1, 12, 0, 0)))

    def test_sweep_marks_only_missed_tasks(self):
        Task.objects.create(title="Open ended", assignee=self.employee)
        Task.objects.create(
            title="Skipped",
            assignee=self.employee,
            due_date=date(2024, 1, 1),
            not_applicable=True,
        )
        marked = TaskLifecycleService.sweep_deadlines(aware(2024, 1, 11, 0, 0))
        self.assertEqual(marked, 1)
        self.assertEqual(Task.objects.filter(approval_status=Task.ApprovalStatus.DEADLINE_PASSED).count(), 1)

    def test_untick_is_admin_only(self):
        TaskLifecycleService.tick(self.task, self.employee, self.now)
        with self.assertRaises(AuthorizationError):
            TaskLifecycleService.untick(self.task, self.employee, self.now)
        task = TaskLifecycleService.untick(self.task, self.admin, self.now)
        self.assertEqual(task.status, Task.Status.PENDING)
        self.assertIsNone(task.completed_at)
        self.assertIsNone(task.ticked_at)

    def test_transition_normalizes_ids_and_rejects_unknown_actions(self):
        result = TaskLifecycleService.transition_task({"id": str(self.task.id)}, "tick", self.employee, self.now)
        self.assertEqual(result.task.status, Task.Status.COMPLETED)
        self.assertIsNone(result.outcome)

        with self.assertRaises(ValidationError):
            TaskLifecycleService.transition_task(self.task.id, "archive", self.admin, self.now)
        with self.assertRaises(ValidationError):
            TaskLifecycleService.transition_task(None, "tick", self.admin, self.now)
        with self.assertRaises(NotFoundError):
            TaskLifecycleService.transition_task(999999, "tick", self.admin, self.now)

    def test_lead_cannot_edit_reward_fields(self):
        with self.assertRaises(AuthorizationError) as ctx:
            TaskLifecycleService.update_task(self.task.id, self.lead, {"bonus_points": 500}, self.now)
        self.assertEqual(ctx.exception.field, "bonus_points")
        self.task.refresh_from_db()
        self.assertEqual(self.task.bonus_points, 50)

    def test_lead_can_edit_other_fields(self):
        result = TaskLifecycleService.update_task(self.task.id, self.lead, {"title": "Write final report"}, self.now)
        self.assertEqual(result.task.title, "Write final report")
        self.assertEqual(result.changed_fields, ["title"])

    def test_admin_can_edit_reward_fields(self):
        result = TaskLifecycleService.update_task(self.task.id, self.admin, {"penalty_currency": 700}, self.now)
        self.assertEqual(result.task.penalty_currency, 700)

    def test_outsider_cannot_edit(self):
        with self.assertRaises(AuthorizationError):
            TaskLifecycleService.update_task(self.task.id, self.outsider, {"title": "Hijack"}, self.now)

    def test_edit_cannot_complete_task_past_subtask_gate(self):
        Subtask.objects.create(task=self.task, title="Draft")
        with self.assertRaises(ValidationError):
            TaskLifecycleService.update_task(self.task.id, self.employee, {"status": Task.Status.COMPLETED}, self.now)
        self.task.refresh_from_db()
        self.assertEqual(self.task.status, Task.Status.PENDING)
        self.assertIsNone(self.task.ticked_at)
        self.assertIsNone(self.task.completed_by_id)

        result = TaskLifecycleService.approve(self.task.id, self.admin, self.now)
        self.assertNotEqual(result.outcome.kind, REWARD)
        self.assertEqual(result.outcome.reason, "not_completed")

    def test_edit_cannot_reopen_approved_task(self):
        TaskLifecycleService.tick(self.task.id, self.employee, self.now)
        TaskLifecycleService.approve(self.task.id, self.admin, self.now)
        with self.assertRaises(ValidationError):
            TaskLifecycleService.update_task(self.task.id, self.admin, {"status": Task.Status.IN_PROGRESS}, self.now)
        self.task.refresh_from_db()
        self.assertEqual(self.task.status, Task.Status.COMPLETED)
        self.assertEqual(self.task.approval_status, Task.ApprovalStatus.APPROVED)

    def test_stale_version_is_retried_with_reapplied_intent(self):
        real_update = TaskLifecycleService._conditional_update
        calls = []

        def flaky(task, changes, now):
            calls.append(task.version)
            if len(calls) == 1:
                # Another writer wins the first round.
                Task.objects.filter(pk=task.pk).update(description="edited elsewhere", version=task.version + 1)
                return 0
            return real_update(task, changes, now)

        with patch.object(TaskLifecycleService, "_conditional_update", side_effect=flaky):
            result = TaskLifecycleService.update_task(self.task.id, self.admin, {"title": "Merged"}, self.now)

        self.assertEqual(calls, [1, 2])
        self.assertEqual(result.task.title, "Merged")
        self.assertEqual(result.task.description, "edited elsewhere")
        self.assertEqual(result.task.version, 3)

    @patch("apps.tasks.services.TasksAuditService.log_save_conflict")
    def test_exhausted_retries_raise_conflict(self, log_save_conflict):
        with patch.object(TaskLifecycleService, "_conditional_update", return_value=0) as update:
            with self.assertRaises(ConcurrencyConflict):
                TaskLifecycleService.update_task(self.task.id, self.admin, {"title": "Never"}, self.now)
        self.assertEqual(update.call_count, 3)
        log_save_conflict.assert_called_once_with(self.task.id, 3)

    def test_create_task_for_self_and_blocks_reward_fields(self):
        task = TaskLifecycleService.create_task(
            self.employee,
            {"title": "Own task", "assignee": self.employee.id, "kind": "daily", "deadline_time": "10:00"},
            self.now,
        )
        self.assertEqual(task.created_by_id, self.employee.id)
        self.assertEqual(task.cycle_date, date(2024, 1, 10))
        self.assertEqual(task.deadline_time, time(10, 0))

        with self.assertRaises(AuthorizationError):
            TaskLifecycleService.create_task(
                self.employee,
                {"title": "Bonus", "assignee": self.employee.id, "bonus_currency": 1000},
                self.now,
            )
        with self.assertRaises(AuthorizationError):
            TaskLifecycleService.create_task(
                self.employee,
                {"title": "Other", "assignee": self.outsider.id},
                self.now,
            )

    def test_create_custom_task_validates_recurrence(self):
        with self.assertRaises(ValidationError):
            TaskLifecycleService.create_task(
                self.admin,
                {"title": "Custom", "assignee": self.employee.id, "kind": "custom", "recurrence": {}},
                self.now,
            )
        task = TaskLifecycleService.create_task(
            self.admin,
            # 2024-01-10 is a Wednesday; 5 is Friday.
            {"title": "Custom", "assignee": self.employee.id, "kind": "custom", "recurrence": {"days_of_week": [5]}},
            self.now,
        )
        self.assertEqual(task.cycle_date, date(2024, 1, 12))
