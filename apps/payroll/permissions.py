from rest_framework.permissions import BasePermission

from .policies import PayrollPolicy


class IsCompensationAdmin(BasePermission):
    def has_permission(self, request, view):
        return PayrollPolicy.can_manage_compensation(request.user)


class CanViewOwnCompensation(BasePermission):
    def has_permission(self, request, view):
        return PayrollPolicy.can_view_own(request.user)
