from __future__ import annotations

from django.db.models import Q

from common.identifiers import normalize_ids

from .models import Project


def projects_led_by(user_id: int):
    return Project.objects.filter(lead_assignees__id=user_id).distinct()


def is_lead_assignee(user_id: int, project_id) -> bool:
    if not project_id:
        return False
    return Project.objects.filter(id=project_id, lead_assignees__id=user_id).exists()


def projects_involving(user_id: int):
    """Projects the user leads, is VA in-charge of, or is update in-charge of."""
    return Project.objects.filter(
        Q(lead_assignees__id=user_id) | Q(va_incharge_id=user_id) | Q(update_incharge_id=user_id)
    ).distinct()


def eligible_lead_projects(user_id: int, *, selected_ids=None):
    """
    Projects a lead is accountable for today.

    With an explicit selection only the selected projects count, whatever their
    status. Otherwise every project the user leads that is not completed or
    cancelled.
    """
    qs = projects_led_by(user_id)
    if selected_ids:
        return qs.filter(id__in=normalize_ids(selected_ids, field="project_ids")).order_by("id")
    return qs.exclude(status__in=[Project.Status.COMPLETED, Project.Status.CANCELLED]).order_by("id")
