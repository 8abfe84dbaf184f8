from datetime import date, timedelta
from unittest.mock import patch

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import AuditLog, Role, User
from apps.audit import AuditEvents
from apps.projects.models import Project
from apps.tasks.models import Task, TaskCompletion


class TasksApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.employee_role, _ = Role.objects.get_or_create(
            name=Role.Name.EMPLOYEE,
            defaults={"level": Role.Level.EMPLOYEE},
        )
        self.admin_role, _ = Role.objects.get_or_create(
            name=Role.Name.ADMIN,
            defaults={"level": Role.Level.ADMIN},
        )
        self.admin = User.objects.create_user(username="api_admin", password="StrongPass123!", role=self.admin_role)
        self.lead = User.objects.create_user(username="api_lead", password="StrongPass123!", role=self.employee_role)
        self.employee = User.objects.create_user(
            username="api_employee",
            password="StrongPass123!",
            role=self.employee_role,
        )
        self.outsider = User.objects.create_user(
            username="api_outsider",
            password="StrongPass123!",
            role=self.employee_role,
        )
        self.project = Project.objects.create(name="Mobile app")
        self.project.lead_assignees.add(self.lead)
        self.task = Task.objects.create(
            title="Fix login",
            project=self.project,
            assignee=self.employee,
            created_by=self.lead,
            bonus_points=10,
            bonus_currency=100,
        )

    @patch("apps.tasks.views.TasksAuditService.log_task_created")
    def test_lead_can_create_task_in_own_project(self, log_task_created):
        self.client.force_authenticate(user=self.lead)
        response = self.client.post(
            "/api/v1/tasks/create/",
            {
                "title": "Ship build",
                "assignee": self.employee.id,
                "project": self.project.id,
                "due_date": "2030-01-10",
                "due_time": "18:00",
            },
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        self.assertTrue(Task.objects.filter(title="Ship build", created_by=self.lead).exists())
        log_task_created.assert_called_once()

    def test_employee_cannot_create_task_for_someone_else(self):
        self.client.force_authenticate(user=self.outsider)
        response = self.client.post(
            "/api/v1/tasks/create/",
            {"title": "Sneaky", "assignee": self.employee.id},
            format="json",
        )
        self.assertEqual(response.status_code, 403)

    def test_detail_is_hidden_from_outsiders(self):
        self.client.force_authenticate(user=self.outsider)
        response = self.client.get(f"/api/v1/tasks/{self.task.id}/")
        self.assertEqual(response.status_code, 403)

        self.client.force_authenticate(user=self.employee)
        response = self.client.get(f"/api/v1/tasks/{self.task.id}/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["title"], "Fix login")

    def test_unknown_task_returns_404(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/v1/tasks/999999/")
        self.assertEqual(response.status_code, 404)

    def test_lead_patching_bonus_gets_field_specific_403(self):
        self.client.force_authenticate(user=self.lead)
        response = self.client.patch(
            f"/api/v1/tasks/{self.task.id}/",
            {"bonus_currency": 5000},
            format="json",
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data["field"], "bonus_currency")
        self.task.refresh_from_db()
        self.assertEqual(self.task.bonus_currency, 100)
        self.assertTrue(AuditLog.objects.filter(action=AuditEvents.TASK_UPDATE_DENIED).exists())

    def test_lead_can_patch_title(self):
        self.client.force_authenticate(user=self.lead)
        response = self.client.patch(f"/api/v1/tasks/{self.task.id}/", {"title": "Fix OAuth login"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["title"], "Fix OAuth login")
        self.assertEqual(response.data["version"], 2)

    def test_patching_status_is_rejected(self):
        self.client.force_authenticate(user=self.employee)
        response = self.client.patch(f"/api/v1/tasks/{self.task.id}/", {"status": "completed"}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("status", response.data)
        self.task.refresh_from_db()
        self.assertEqual(self.task.status, Task.Status.PENDING)

    def test_tick_then_approve_returns_outcome(self):
        self.client.force_authenticate(user=self.employee)
        response = self.client.post(f"/api/v1/tasks/{self.task.id}/transition/", {"action": "tick"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], Task.Status.COMPLETED)

        self.client.force_authenticate(user=self.admin)
        response = self.client.post(f"/api/v1/tasks/{self.task.id}/transition/", {"action": "approve"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["approval_status"], Task.ApprovalStatus.APPROVED)
        self.assertEqual(response.data["outcome"]["kind"], "reward")
        self.assertEqual(response.data["outcome"]["label"], "+10 points")

    def test_unknown_action_is_400(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(f"/api/v1/tasks/{self.task.id}/transition/", {"action": "archive"}, format="json")
        self.assertEqual(response.status_code, 400)

    def test_employee_cannot_approve(self):
        self.client.force_authenticate(user=self.employee)
        response = self.client.post(f"/api/v1/tasks/{self.task.id}/transition/", {"action": "approve"}, format="json")
        self.assertEqual(response.status_code, 403)

    def test_sweep_endpoint_is_admin_only(self):
        Task.objects.create(
            title="Old",
            assignee=self.employee,
            due_date=timezone.localdate() - timedelta(days=2),
        )
        self.client.force_authenticate(user=self.employee)
        response = self.client.post("/api/v1/tasks/admin/sweep-deadlines/", {}, format="json")
        self.assertEqual(response.status_code, 403)

        self.client.force_authenticate(user=self.admin)
        response = self.client.post("/api/v1/tasks/admin/sweep-deadlines/", {}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["marked"], 1)

    def test_reset_recurring_and_list_completions(self):
        daily = Task.objects.create(
            title="Daily sync",
            kind=Task.Kind.DAILY,
            assignee=self.employee,
            cycle_date=date(2020, 1, 1),
        )
        self.client.force_authenticate(user=self.admin)
        response = self.client.post("/api/v1/tasks/admin/reset-recurring/", {"kind": "daily"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["archived"], 1)
        self.assertEqual(TaskCompletion.objects.filter(task=daily).count(), 1)

        self.client.force_authenticate(user=self.employee)
        response = self.client.get(f"/api/v1/tasks/{daily.id}/completions/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["cycle_date"], "2020-01-01")
