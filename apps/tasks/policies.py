from __future__ import annotations

from accounts.access_policy import AccessPolicy
from apps.projects.services import is_lead_assignee
from common.exceptions import AuthorizationError

from .models import Task


class TaskPolicy:
    @staticmethod
    def is_admin_like(user) -> bool:
        return AccessPolicy.is_admin_like(user)

    @staticmethod
    def is_project_lead(user, project_id) -> bool:
        if not user or not user.is_authenticated:
            return False
        return is_lead_assignee(user.id, project_id)

    @classmethod
    def is_owner(cls, user, task) -> bool:
        return task.assignee_id == user.id or task.created_by_id == user.id

    @classmethod
    def can_view_task(cls, actor, task) -> bool:
        if not actor or not actor.is_authenticated:
            return False
        if cls.is_admin_like(actor) or cls.is_owner(actor, task):
            return True
        return cls.is_project_lead(actor, task.project_id)

    @classmethod
    def can_tick(cls, actor, task) -> bool:
        return cls.can_view_task(actor, task)

    @classmethod
    def can_review(cls, actor) -> bool:
        return bool(actor and actor.is_authenticated and cls.is_admin_like(actor))

    @classmethod
    def can_create_for(cls, actor, assignee, project_id) -> bool:
        if not actor or not actor.is_authenticated:
            return False
        if cls.is_admin_like(actor):
            return True
        if cls.is_project_lead(actor, project_id):
            return True
        # Any employee can create a task for themselves.
        return actor.id == assignee.id

    @classmethod
    def check_reward_fields(cls, actor, fields) -> None:
        """Bonus and penalty amounts are admin-only, whatever else the actor may edit."""
        if cls.is_admin_like(actor):
            return
        for field in Task.REWARD_FIELDS:
            if field in fields:
                raise AuthorizationError(field=field)

    @classmethod
    def check_edit(cls, actor, task, fields) -> None:
        if not actor or not actor.is_authenticated:
            raise AuthorizationError()
        cls.check_reward_fields(actor, fields)
        if cls.is_admin_like(actor):
            return
        if cls.is_project_lead(actor, task.project_id) or cls.is_owner(actor, task):
            return
        raise AuthorizationError("You cannot edit this task.")
