from datetime import date, datetime, time, timedelta
from types import SimpleNamespace

import pytest
from django.utils import timezone

from apps.tasks.deadlines import (
    effective_deadline,
    evaluate,
    is_after,
    missed_deadline,
    parse_time,
)
from apps.tasks.rewards import NEUTRAL, PENALTY, REWARD, determine_outcome


def aware(*args):
    return timezone.make_aware(datetime(*args), timezone.get_current_timezone())


def make_task(**overrides):
    fields = {
        "kind": "one-time",
        "status": "pending",
        "approval_status": "pending",
        "not_applicable": False,
        "cycle_date": None,
        "assigned_date": None,
        "due_date": None,
        "due_time": None,
        "deadline_date": None,
        "deadline_time": None,
        "ticked_at": None,
        "completed_at": None,
        "bonus_points": 0,
        "bonus_currency": 0,
        "penalty_points": 0,
        "penalty_currency": 0,
    }
    fields.update(overrides)
    task = SimpleNamespace(**fields)
    task.is_recurring = task.kind in ("daily", "weekly", "monthly", "custom")
    task.is_completed = task.status == "completed"
    return task


def test_parse_time_accepts_strings_and_objects():
    assert parse_time("15:00") == time(15, 0)
    assert parse_time("07:30:15") == time(7, 30, 15)
    assert parse_time(time(9, 5)) == time(9, 5)
    assert parse_time(None) is None
    with pytest.raises(ValueError):
        parse_time("noon")


def test_deadline_time_with_date_is_exact_instant():
    deadline = effective_deadline(
        kind="one-time",
        today=date(2024, 1, 1),
        deadline_date=date(2024, 1, 10),
        deadline_time="15:00",
    )
    assert deadline == aware(2024, 1, 10, 15, 0)


def test_date_only_means_end_of_day():
    deadline = effective_deadline(kind="one-time", today=date(2024, 1, 1), due_date=date(2024, 1, 10))
    assert deadline == aware(2024, 1, 10, 23, 59, 59, 999999)


def test_deadline_pair_wins_over_due_pair():
    deadline = effective_deadline(
        kind="one-time",
        today=date(2024, 1, 1),
        deadline_date=date(2024, 1, 5),
        due_date=date(2024, 1, 10),
        due_time="12:00",
    )
    assert deadline == aware(2024, 1, 5, 23, 59, 59, 999999)


def test_time_only_recurring_deadline_anchors_on_assigned_date_or_today():
    anchored = effective_deadline(
        kind="daily",
        today=date(2024, 1, 12),
        deadline_time="10:00",
        assigned_date=date(2024, 1, 11),
    )
    assert anchored == aware(2024, 1, 11, 10, 0)

    today_based = effective_deadline(kind="daily", today=date(2024, 1, 12), deadline_time="10:00")
    assert today_based == aware(2024, 1, 12, 10, 0)


def test_time_only_one_time_deadline_is_ignored():
    assert effective_deadline(kind="one-time", today=date(2024, 1, 12), deadline_time="10:00") is None


def test_no_deadline_is_never_past():
    status = evaluate(now=aware(2030, 1, 1, 0, 0), kind="one-time")
    assert status.is_past_deadline is False
    assert status.effective_deadline is None


def test_exact_deadline_is_not_past_and_approval_grants_reward():
    deadline_fields = {"deadline_date": date(2024, 1, 10), "deadline_time": "15:00"}
    at_deadline = aware(2024, 1, 10, 15, 0, 0)

    assert evaluate(now=at_deadline, kind="one-time", **deadline_fields).is_past_deadline is False
    assert evaluate(now=at_deadline + timedelta(microseconds=1), kind="one-time", **deadline_fields).is_past_deadline

    task = make_task(
        status="completed",
        approval_status="approved",
        ticked_at=at_deadline,
        completed_at=at_deadline,
        deadline_date=date(2024, 1, 10),
        deadline_time=time(15, 0),
        bonus_points=50,
        bonus_currency=200,
        penalty_points=20,
    )
    outcome = determine_outcome(task, now=aware(2024, 1, 11, 9, 0))
    assert outcome.kind == REWARD
    assert outcome.points == 50
    assert outcome.currency == 200
    assert outcome.label == "+50 points"


def test_is_after_is_strict():
    instant = aware(2024, 1, 10, 15, 0)
    assert is_after(instant, instant) is False
    assert is_after(instant, None) is False


def test_late_completion_is_penalized_with_currency_fallback():
    task = make_task(
        status="completed",
        approval_status="approved",
        ticked_at=aware(2024, 1, 10, 15, 1),
        deadline_date=date(2024, 1, 10),
        deadline_time=time(15, 0),
        bonus_points=50,
        penalty_points=30,
    )
    outcome = determine_outcome(task, now=aware(2024, 1, 11, 9, 0))
    assert outcome.kind == PENALTY
    assert outcome.points == 30
    assert outcome.currency == 30
    assert outcome.reason == "completed_late"


def test_completed_without_bonus_is_neutral():
    task = make_task(status="completed", approval_status="approved", ticked_at=aware(2024, 1, 9, 12, 0))
    outcome = determine_outcome(task, now=aware(2024, 1, 9, 13, 0))
    assert outcome.kind == NEUTRAL
    assert outcome.label == "0 points"


def test_rejected_task_never_rewards():
    task = make_task(status="completed", approval_status="rejected", bonus_points=10)
    assert determine_outcome(task, now=aware(2024, 1, 9, 13, 0)).kind == NEUTRAL

    task.penalty_currency = 400
    outcome = determine_outcome(task, now=aware(2024, 1, 9, 13, 0))
    assert outcome.kind == PENALTY
    assert outcome.currency == 400


def test_missed_deadline_rules():
    now = aware(2024, 1, 11, 9, 0)
    overdue = make_task(due_date=date(2024, 1, 10))
    assert missed_deadline(overdue, now) is True

    on_time = make_task(status="completed", due_date=date(2024, 1, 10), ticked_at=aware(2024, 1, 10, 12, 0))
    assert missed_deadline(on_time, now) is False

    late = make_task(status="completed", due_date=date(2024, 1, 9), ticked_at=aware(2024, 1, 10, 12, 0))
    assert missed_deadline(late, now) is True

    resolved = make_task(approval_status="approved", due_date=date(2024, 1, 10))
    assert missed_deadline(resolved, now) is False

    skipped = make_task(not_applicable=True, due_date=date(2024, 1, 10))
    assert missed_deadline(skipped, now) is False
