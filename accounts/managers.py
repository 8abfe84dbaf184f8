from django.contrib.auth.models import UserManager as DjangoUserManager
from django.apps import apps


class UserManager(DjangoUserManager):

    def _default_role(self, name, level, description):
        Role = apps.get_model("accounts", "Role")
        role, _ = Role.objects.get_or_create(
            name=name,
            defaults={"level": level, "description": description},
        )
        return role

    def create_user(self, username, email=None, password=None, **extra_fields):
        if "role" not in extra_fields and "role_id" not in extra_fields:
            Role = apps.get_model("accounts", "Role")
            extra_fields["role"] = self._default_role(Role.Name.EMPLOYEE, Role.Level.EMPLOYEE, "Employee")
        return super().create_user(username, email, password, **extra_fields)

    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        Role = apps.get_model("accounts", "Role")
        extra_fields["role"] = self._default_role(
            Role.Name.SUPER_ADMIN,
            Role.Level.SUPER_ADMIN,
            "System super administrator",
        )

        return super().create_superuser(username, email, password, **extra_fields)
