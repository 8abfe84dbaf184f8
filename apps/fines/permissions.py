from rest_framework.permissions import BasePermission

from .policies import FinePolicy


class IsFineAdmin(BasePermission):
    def has_permission(self, request, view):
        return FinePolicy.can_manage_fines(request.user)


class CanMarkDailyTaskNA(BasePermission):
    def has_permission(self, request, view):
        return FinePolicy.can_mark_na(request.user)
