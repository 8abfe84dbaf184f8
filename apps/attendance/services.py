from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from django.db.models import Count, Q

from .models import AttendanceMark, DailyUpdate, MissedMeeting


DEFAULT_DAY_HOURS = Decimal("8")


@dataclass(frozen=True)
class AttendanceStats:
    hours: Decimal
    recorded_days: int


@dataclass(frozen=True)
class DailyUpdateStats:
    total: int
    with_loom_and_gform: int


@dataclass(frozen=True)
class MeetingStats:
    team: int = 0
    internal: int = 0
    client: int = 0


def attendance_stats(*, user_id: int, start: date, end: date) -> AttendanceStats:
    """Hours and days present in [start, end]. A mark without hours, or with zero hours, counts as a full day."""
    marks = AttendanceMark.objects.filter(
        user_id=user_id,
        date__range=(start, end),
        status__in=AttendanceMark.PRESENT_STATUSES,
    ).values_list("hours_worked", flat=True)

    hours = Decimal("0")
    days = 0
    for value in marks:
        hours += value or DEFAULT_DAY_HOURS
        days += 1
    return AttendanceStats(hours=hours, recorded_days=days)


def daily_update_stats(*, user_id: int, start: date, end: date) -> DailyUpdateStats:
    """Only admin-approved updates count."""
    values = DailyUpdate.objects.filter(employee_id=user_id, admin_approved=True, date__range=(start, end)).aggregate(
        total=Count("id"),
        both=Count("id", filter=Q(recorded_loom_videos=True, updated_daily_progress=True)),
    )
    return DailyUpdateStats(total=values["total"], with_loom_and_gform=values["both"])


def missed_meeting_stats(*, user_id: int, start: date, end: date) -> MeetingStats:
    counts = dict(
        MissedMeeting.objects.filter(employee_id=user_id, date__range=(start, end))
        .values("kind")
        .annotate(total=Count("id"))
        .values_list("kind", "total")
    )
    return MeetingStats(
        team=counts.get(MissedMeeting.Kind.TEAM, 0),
        internal=counts.get(MissedMeeting.Kind.INTERNAL, 0),
        client=counts.get(MissedMeeting.Kind.CLIENT, 0),
    )
