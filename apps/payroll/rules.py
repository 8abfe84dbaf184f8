"""Bonus and fine rules for one compensation period.

Everything here is a pure function of ``CompensationInputs``; data collection
and persistence live in ``apps.payroll.services``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Optional


DEFAULT_BASE_AMOUNT = 5000

PRODUCTS_BONUS = 1000
PRODUCTS_THRESHOLD = 3
ATTENDANCE_BONUS_TIERS = ((200, 2000), (160, 1000), (140, 500))
LOOM_GFORM_BONUS = 1000
LOOM_GFORM_RATIO = 0.8
LOYALTY_BONUS = 2000
LOYALTY_MONTHS = 6
COMPLETED_PROJECTS_BONUS = 2000
TRAINING_MONTHS = 3

# (grace, amount per occurrence above grace)
DAILY_UPDATES_FINE = (3, 200)
TEAM_MEETINGS_FINE = (3, 300)
INTERNAL_MEETINGS_FINE = (3, 200)
CLIENT_MEETINGS_FINE = (1, 300)

# (minimum absent days, fine); the first matching row wins.
ABSENCE_FINE_TIERS = ((14, -500), (7, 1000), (5, 1500), (3, 2000), (2, 2500), (1, 3000))

NO_PAYMENT_MIN_HOURS = 100
NO_PAYMENT_MAX_ABSENT_DAYS = 4


@dataclass(frozen=True)
class CompensationInputs:
    products_count: int = 0
    approved_client_projects: int = 0
    attendance_hours: float = 0.0
    absent_days: int = 0
    daily_updates_count: int = 0
    loom_gform_count: int = 0
    missing_daily_updates: int = 0
    missed_team_meetings: int = 0
    missed_internal_meetings: int = 0
    missed_client_meetings: int = 0
    is_project_lead: bool = False
    has_completed_as_lead: bool = False
    months_worked: int = 0
    missing_daily_tasks_fine: int = 0
    custom_fines_currency: int = 0

    @property
    def is_in_training(self) -> bool:
        return self.months_worked < TRAINING_MONTHS

    def as_dict(self) -> dict:
        return {**asdict(self), "is_in_training": self.is_in_training}


@dataclass(frozen=True)
class CompensationBreakdown:
    base_amount: int
    bonuses: dict
    fines: dict
    sum_of_all_fines: int
    total_bonus: int
    total_fine: int
    custom_fines_currency: int
    grand_total_fine: int
    net_amount: int
    no_payment_reasons: list = field(default_factory=list)
    applied_overrides: list = field(default_factory=list)
    approved_by_core_team: bool = False

    @property
    def payment_blocked(self) -> bool:
        return bool(self.no_payment_reasons) and not self.approved_by_core_team

    def as_dict(self) -> dict:
        return {**asdict(self), "payment_blocked": self.payment_blocked}


def attendance_bonus(hours: float) -> int:
    for threshold, amount in ATTENDANCE_BONUS_TIERS:
        if hours > threshold:
            return amount
    return 0


def absence_fine(absent_days: int) -> int:
    for minimum, amount in ABSENCE_FINE_TIERS:
        if absent_days >= minimum:
            return amount
    return 0


def graced_fine(count: int, rule: tuple[int, int]) -> int:
    grace, amount = rule
    return max(0, count - grace) * amount


def compute_bonuses(inputs: CompensationInputs) -> dict:
    loom_ratio = inputs.loom_gform_count / inputs.daily_updates_count if inputs.daily_updates_count else 0.0
    completed_bonus = 0
    if inputs.products_count > 0:
        completed_bonus = COMPLETED_PROJECTS_BONUS * (2 if inputs.has_completed_as_lead else 1)
    return {
        "products_bonus": PRODUCTS_BONUS if inputs.products_count > PRODUCTS_THRESHOLD else 0,
        "attendance_bonus": attendance_bonus(inputs.attendance_hours),
        "daily_loom_gform_bonus": LOOM_GFORM_BONUS if loom_ratio >= LOOM_GFORM_RATIO else 0,
        "loyalty_bonus": LOYALTY_BONUS if inputs.months_worked >= LOYALTY_MONTHS else 0,
        "completed_projects_bonus": completed_bonus,
    }


def compute_fines(inputs: CompensationInputs) -> dict:
    return {
        "missing_daily_updates_fine": graced_fine(inputs.missing_daily_updates, DAILY_UPDATES_FINE),
        "missing_team_meetings_fine": graced_fine(inputs.missed_team_meetings, TEAM_MEETINGS_FINE),
        "missing_internal_meetings_fine": graced_fine(inputs.missed_internal_meetings, INTERNAL_MEETINGS_FINE),
        "missing_client_meetings_fine": graced_fine(inputs.missed_client_meetings, CLIENT_MEETINGS_FINE),
        "absence_fines": absence_fine(inputs.absent_days),
        "missing_daily_tasks_fine": inputs.missing_daily_tasks_fine,
    }


def no_payment_reasons(inputs: CompensationInputs) -> list[str]:
    reasons = []
    if inputs.attendance_hours < NO_PAYMENT_MIN_HOURS:
        reasons.append(f"attendance below {NO_PAYMENT_MIN_HOURS} hours")
    if inputs.absent_days > NO_PAYMENT_MAX_ABSENT_DAYS:
        reasons.append(f"more than {NO_PAYMENT_MAX_ABSENT_DAYS} absent days")
    if inputs.products_count == 0:
        reasons.append("no completed products")
    return reasons


def compute_breakdown(
    inputs: CompensationInputs,
    *,
    base_amount: int = DEFAULT_BASE_AMOUNT,
    manual_bonus: Optional[int] = None,
    manual_fine: Optional[int] = None,
    approved_by_core_team: bool = False,
) -> CompensationBreakdown:
    bonuses = compute_bonuses(inputs)
    fines = compute_fines(inputs)
    applied = []

    total_bonus = max(0, sum(bonuses.values()))

    sum_of_all_fines = sum(fines.values())
    total_fine = sum_of_all_fines
    if inputs.products_count > PRODUCTS_THRESHOLD or inputs.approved_client_projects > PRODUCTS_THRESHOLD:
        total_fine = 0
        applied.append("no_fine")
    if inputs.is_in_training:
        total_fine = 0
        applied.append("training")
    if inputs.is_project_lead and total_fine > 0:
        total_fine *= 2
        applied.append("lead_multiplier")
    total_fine = max(0, total_fine)

    if manual_bonus is not None:
        total_bonus = max(0, manual_bonus)
        applied.append("manual_bonus")
    if manual_fine is not None:
        total_fine = max(0, manual_fine)
        applied.append("manual_fine")

    reasons = no_payment_reasons(inputs)
    net_amount = base_amount + total_bonus - total_fine
    if reasons and not approved_by_core_team:
        net_amount = 0

    return CompensationBreakdown(
        base_amount=base_amount,
        bonuses=bonuses,
        fines=fines,
        sum_of_all_fines=sum_of_all_fines,
        total_bonus=total_bonus,
        total_fine=total_fine,
        custom_fines_currency=inputs.custom_fines_currency,
        grand_total_fine=total_fine + inputs.custom_fines_currency,
        net_amount=net_amount,
        no_payment_reasons=reasons,
        applied_overrides=applied,
        approved_by_core_team=approved_by_core_team,
    )
