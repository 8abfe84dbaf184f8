from rest_framework.permissions import BasePermission

from .policies import TaskPolicy


class IsTaskAdmin(BasePermission):
    def has_permission(self, request, view):
        return TaskPolicy.can_review(request.user)
