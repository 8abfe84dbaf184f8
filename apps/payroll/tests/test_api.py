from datetime import date
from unittest.mock import patch

from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from accounts.models import Role, User
from apps.payroll.models import AdHocLedgerEntry, BonusFineRecord


@override_settings(COMPENSATION_BASE_AMOUNT=5000)
class PayrollApiTests(TestCase):
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
        self.admin = User.objects.create_user(username="payroll_admin", password="StrongPass123!", role=self.admin_role)
        self.employee = User.objects.create_user(
            username="payroll_employee",
            password="StrongPass123!",
            role=self.employee_role,
        )

    def test_employee_sees_own_breakdown(self):
        self.client.force_authenticate(user=self.employee)
        response = self.client.get("/api/v1/payroll/compensation/", {"period": "weekly"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["record"]["employee"], self.employee.id)
        self.assertEqual(response.data["record"]["period"], "weekly")
        self.assertIn("bonuses", response.data["breakdown"])
        self.assertTrue(BonusFineRecord.objects.filter(employee=self.employee, period="weekly").exists())

    def test_invalid_period_is_rejected(self):
        self.client.force_authenticate(user=self.employee)
        response = self.client.get("/api/v1/payroll/compensation/", {"period": "yearly"})
        self.assertEqual(response.status_code, 400)

    def test_employee_cannot_use_admin_endpoints(self):
        self.client.force_authenticate(user=self.employee)
        response = self.client.post(
            "/api/v1/payroll/admin/compensation/",
            {"employee_id": self.employee.id},
            format="json",
        )
        self.assertEqual(response.status_code, 403)

    @patch("apps.payroll.views.PayrollAuditService.log_compensation_computed")
    def test_admin_computes_for_employee(self, log_computed):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            "/api/v1/payroll/admin/compensation/",
            {"employee_id": self.employee.id, "period": "monthly"},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["record"]["base_amount"], 5000)
        log_computed.assert_called_once()

        listing = self.client.get("/api/v1/payroll/admin/compensation/")
        self.assertEqual([row["employee"] for row in listing.data], [self.employee.id])

    def test_admin_compute_requires_target(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post("/api/v1/payroll/admin/compensation/", {}, format="json")
        self.assertEqual(response.status_code, 400)

    def test_admin_recalculates_everyone(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            "/api/v1/payroll/admin/compensation/",
            {"all_employees": True},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["records_created"], 1)

    def test_override_flow(self):
        self.client.force_authenticate(user=self.admin)
        created = self.client.post(
            "/api/v1/payroll/admin/compensation/",
            {"employee_id": self.employee.id},
            format="json",
        )
        record_id = created.data["record"]["id"]

        negative = self.client.patch(
            f"/api/v1/payroll/admin/records/{record_id}/override/",
            {"manual_fine": -5},
            format="json",
        )
        self.assertEqual(negative.status_code, 400)

        response = self.client.patch(
            f"/api/v1/payroll/admin/records/{record_id}/override/",
            {"manual_bonus": 700, "manual_fine": 0, "approved_by_core_team": True, "admin_notes": "Good month"},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["record"]["net_amount"], 5700)
        self.assertEqual(response.data["record"]["admin_notes"], "Good month")

    def test_admin_cannot_override_own_record(self):
        record = BonusFineRecord.objects.create(employee=self.admin, month=3, year=2024)
        self.client.force_authenticate(user=self.admin)
        response = self.client.patch(
            f"/api/v1/payroll/admin/records/{record.id}/override/",
            {"manual_bonus": 10000},
            format="json",
        )
        self.assertEqual(response.status_code, 403)

    def test_unknown_record_returns_404(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.patch("/api/v1/payroll/admin/records/9999/override/", {"manual_bonus": 1}, format="json")
        self.assertEqual(response.status_code, 404)

    def test_ledger_entry_creation(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            "/api/v1/payroll/admin/ledger/",
            {
                "employee": self.employee.id,
                "date": "2024-03-04",
                "kind": "bonus",
                "value_type": "currency",
                "value": 250,
                "description": "Covered weekend release",
            },
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        entry = AdHocLedgerEntry.objects.get(pk=response.data["id"])
        self.assertEqual(entry.created_by, self.admin)
        self.assertEqual(entry.date, date(2024, 3, 4))

        listing = self.client.get("/api/v1/payroll/admin/ledger/", {"employee_id": self.employee.id})
        self.assertEqual(len(listing.data), 1)

    def test_ledger_rejects_zero_value(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            "/api/v1/payroll/admin/ledger/",
            {"employee": self.employee.id, "date": "2024-03-04", "kind": "fine", "value_type": "points", "value": 0},
            format="json",
        )
        self.assertEqual(response.status_code, 400)

    def test_signal_summary(self):
        AdHocLedgerEntry.objects.create(
            employee=self.employee,
            date=date(2024, 3, 4),
            kind=AdHocLedgerEntry.Kind.FINE,
            value_type=AdHocLedgerEntry.ValueType.POINTS,
            value=4,
        )
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(
            "/api/v1/payroll/admin/summary/",
            {"employee_id": self.employee.id, "start": "2024-03-01", "end": "2024-03-31"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["totals"]["fine_points"], 4)
        self.assertEqual(response.data["days"][0]["date"], "2024-03-04")

        bad = self.client.get(
            "/api/v1/payroll/admin/summary/",
            {"employee_id": self.employee.id, "start": "2024-03-31", "end": "2024-03-01"},
        )
        self.assertEqual(bad.status_code, 400)
