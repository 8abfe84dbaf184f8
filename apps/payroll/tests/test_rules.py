import pytest

from apps.payroll.rules import (
    CompensationInputs,
    absence_fine,
    attendance_bonus,
    compute_breakdown,
    graced_fine,
)


def seasoned(**overrides):
    fields = {"months_worked": 12, "products_count": 1, "attendance_hours": 150.0}
    fields.update(overrides)
    return CompensationInputs(**fields)


def test_training_overrides_absence_fine():
    inputs = CompensationInputs(months_worked=2, absent_days=10, products_count=0)

    breakdown = compute_breakdown(inputs)

    assert breakdown.fines["absence_fines"] == 1000
    assert breakdown.sum_of_all_fines == 1000
    assert breakdown.total_fine == 0
    assert "training" in breakdown.applied_overrides


def test_lead_multiplier_doubles_fines():
    inputs = seasoned(is_project_lead=True, missing_daily_updates=9)

    breakdown = compute_breakdown(inputs)

    assert breakdown.sum_of_all_fines == 1200
    assert breakdown.total_fine == 2400


def test_no_fine_condition_beats_lead_multiplier():
    inputs = seasoned(is_project_lead=True, missing_daily_updates=9, approved_client_projects=4)

    breakdown = compute_breakdown(inputs)

    assert breakdown.total_fine == 0
    assert "lead_multiplier" not in breakdown.applied_overrides


@pytest.mark.parametrize(
    "hours, expected",
    [(200.5, 2000), (200, 1000), (160.5, 1000), (141, 500), (140, 0), (0, 0)],
)
def test_attendance_bonus_takes_highest_band(hours, expected):
    assert attendance_bonus(hours) == expected


@pytest.mark.parametrize(
    "days, expected",
    [(0, 0), (1, 3000), (2, 2500), (3, 2000), (4, 2000), (5, 1500), (6, 1500), (7, 1000), (13, 1000), (14, -500)],
)
def test_absence_tiers(days, expected):
    assert absence_fine(days) == expected


def test_grace_thresholds():
    assert graced_fine(3, (3, 200)) == 0
    assert graced_fine(5, (3, 300)) == 600
    assert graced_fine(1, (1, 300)) == 0
    assert graced_fine(3, (1, 300)) == 600


def test_negative_absence_discount_is_clamped():
    breakdown = compute_breakdown(seasoned(absent_days=20))

    assert breakdown.sum_of_all_fines == -500
    assert breakdown.total_fine == 0


def test_bonus_components():
    inputs = seasoned(
        products_count=4,
        attendance_hours=210.0,
        daily_updates_count=10,
        loom_gform_count=8,
        has_completed_as_lead=True,
    )

    breakdown = compute_breakdown(inputs)

    assert breakdown.bonuses == {
        "products_bonus": 1000,
        "attendance_bonus": 2000,
        "daily_loom_gform_bonus": 1000,
        "loyalty_bonus": 2000,
        "completed_projects_bonus": 4000,
    }
    assert breakdown.total_bonus == 10000
    assert breakdown.net_amount == 5000 + 10000


def test_loom_bonus_needs_updates():
    breakdown = compute_breakdown(seasoned(daily_updates_count=0, loom_gform_count=0))
    assert breakdown.bonuses["daily_loom_gform_bonus"] == 0


def test_manual_overrides_replace_totals():
    inputs = seasoned(missing_daily_updates=9)

    breakdown = compute_breakdown(inputs, manual_bonus=300, manual_fine=50)

    assert breakdown.total_bonus == 300
    assert breakdown.total_fine == 50
    assert breakdown.net_amount == 5000 + 300 - 50


def test_no_payment_conditions_zero_net_until_approved():
    inputs = seasoned(attendance_hours=80.0, products_count=0)

    blocked = compute_breakdown(inputs)
    approved = compute_breakdown(inputs, approved_by_core_team=True)

    assert blocked.net_amount == 0
    assert blocked.payment_blocked
    assert len(blocked.no_payment_reasons) == 2
    assert approved.net_amount == approved.base_amount + approved.total_bonus - approved.total_fine
    assert not approved.payment_blocked


def test_custom_fines_only_reach_grand_total():
    inputs = seasoned(products_count=5, missing_daily_updates=9, custom_fines_currency=700)

    breakdown = compute_breakdown(inputs, base_amount=6000)

    assert breakdown.total_fine == 0
    assert breakdown.grand_total_fine == 700
    assert breakdown.net_amount == 6000 + breakdown.total_bonus


def test_breakdown_is_deterministic():
    inputs = seasoned(is_project_lead=True, missed_team_meetings=5, missed_client_meetings=2)
    assert compute_breakdown(inputs).as_dict() == compute_breakdown(inputs).as_dict()
