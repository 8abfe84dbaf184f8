from __future__ import annotations

from .models import Role


class AccessPolicy:
    """Centralized role checks. Project-relative roles live in apps.projects."""

    @staticmethod
    def _has_role(user) -> bool:
        return bool(user and user.is_authenticated and getattr(user, "role", None))

    @classmethod
    def is_super_admin(cls, user) -> bool:
        return cls._has_role(user) and user.role.name == Role.Name.SUPER_ADMIN

    @classmethod
    def is_admin(cls, user) -> bool:
        return cls._has_role(user) and user.role.name == Role.Name.ADMIN

    @classmethod
    def is_admin_like(cls, user) -> bool:
        return cls.is_super_admin(user) or cls.is_admin(user)

    @classmethod
    def is_employee(cls, user) -> bool:
        return cls._has_role(user) and user.role.name == Role.Name.EMPLOYEE

    @classmethod
    def is_active_member(cls, user) -> bool:
        return cls._has_role(user) and user.is_active and not getattr(user, "is_blocked", False)

