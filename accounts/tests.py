from django.test import TestCase
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from .access_policy import AccessPolicy
from .models import Role, User


class LoginApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.role, _ = Role.objects.get_or_create(
            name=Role.Name.EMPLOYEE,
            defaults={"level": Role.Level.EMPLOYEE},
        )
        self.user = User.objects.create_user(
            username="employee1",
            email="employee1@example.com",
            password="StrongPass123!",
            role=self.role,
        )

    def test_login_embeds_role_claims(self):
        response = self.client.post(
            "/api/v1/auth/login/",
            {"username": "employee1", "password": "StrongPass123!"},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["role"], Role.Name.EMPLOYEE)

        token = AccessToken(response.data["access"])
        self.assertEqual(token["role"], Role.Name.EMPLOYEE)
        self.assertEqual(token["role_level"], Role.Level.EMPLOYEE)

    def test_blocked_user_cannot_login(self):
        self.user.is_blocked = True
        self.user.save(update_fields=["is_blocked"])

        response = self.client.post(
            "/api/v1/auth/login/",
            {"username": "employee1", "password": "StrongPass123!"},
            format="json",
        )
        self.assertEqual(response.status_code, 401)


class UserManagerTests(TestCase):
    def test_create_user_defaults_to_employee_role(self):
        user = User.objects.create_user(username="plain", password="StrongPass123!")
        self.assertEqual(user.role.name, Role.Name.EMPLOYEE)
        self.assertTrue(AccessPolicy.is_employee(user))
        self.assertFalse(user.is_admin_like)

    def test_create_superuser_gets_super_admin_role(self):
        user = User.objects.create_superuser(username="root", password="StrongPass123!")
        self.assertEqual(user.role.name, Role.Name.SUPER_ADMIN)
        self.assertTrue(AccessPolicy.is_admin_like(user))
        self.assertTrue(user.is_staff)


class AccessPolicyTests(TestCase):
    def test_blocked_user_is_not_active_member(self):
        role, _ = Role.objects.get_or_create(name=Role.Name.ADMIN, defaults={"level": Role.Level.ADMIN})
        user = User.objects.create_user(username="adm", password="StrongPass123!", role=role)
        self.assertTrue(AccessPolicy.is_active_member(user))

        user.is_blocked = True
        self.assertFalse(AccessPolicy.is_active_member(user))
        self.assertTrue(AccessPolicy.is_admin(user))
