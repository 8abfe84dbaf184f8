from __future__ import annotations

from accounts.access_policy import AccessPolicy


class FinePolicy:
    @staticmethod
    def can_manage_fines(user) -> bool:
        return bool(user and user.is_authenticated and AccessPolicy.is_admin_like(user))

    @staticmethod
    def can_mark_na(user) -> bool:
        return bool(user and user.is_authenticated and AccessPolicy.is_active_member(user))
