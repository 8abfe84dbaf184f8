from __future__ import annotations

from accounts.access_policy import AccessPolicy


class PayrollPolicy:
    @staticmethod
    def can_manage_compensation(user) -> bool:
        return bool(user and user.is_authenticated and AccessPolicy.is_admin_like(user))

    @staticmethod
    def can_view_own(user) -> bool:
        return bool(user and user.is_authenticated and AccessPolicy.is_active_member(user))

    @staticmethod
    def can_override(actor, record) -> bool:
        """Admins may override anyone's record except their own."""
        if not PayrollPolicy.can_manage_compensation(actor):
            return False
        return record.employee_id != actor.id
