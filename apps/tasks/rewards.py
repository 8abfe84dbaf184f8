from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime

from .deadlines import evaluate_task, is_after
from .models import Task


REWARD = "reward"
PENALTY = "penalty"
NEUTRAL = "neutral"


@dataclass(frozen=True)
class TaskOutcome:
    kind: str
    points: int = 0
    currency: int = 0
    reason: str = ""

    @property
    def label(self) -> str:
        if self.kind == REWARD:
            return f"+{self.points} points"
        if self.kind == PENALTY:
            return f"-{self.points} points"
        return "0 points"

    def as_dict(self) -> dict:
        return {**asdict(self), "label": self.label}


def _has_penalty(task) -> bool:
    return task.penalty_points > 0 or task.penalty_currency > 0


def _has_bonus(task) -> bool:
    return task.bonus_points > 0 or task.bonus_currency > 0


def penalty_for(task, reason: str) -> TaskOutcome:
    if not _has_penalty(task):
        return TaskOutcome(kind=NEUTRAL, reason=reason)
    currency = task.penalty_currency
    if currency == 0 and task.penalty_points > 0:
        currency = task.penalty_points
    return TaskOutcome(kind=PENALTY, points=task.penalty_points, currency=currency, reason=reason)


def determine_outcome(task, now: datetime) -> TaskOutcome:
    """Reward, penalty or nothing for a task that has just been resolved."""
    if task.approval_status in (Task.ApprovalStatus.REJECTED, Task.ApprovalStatus.DEADLINE_PASSED):
        return penalty_for(task, reason=task.approval_status)

    deadline = evaluate_task(task, now).effective_deadline

    if task.is_completed:
        completion_instant = task.ticked_at or task.completed_at or now
        if is_after(completion_instant, deadline):
            return penalty_for(task, reason="completed_late")
        if _has_bonus(task):
            return TaskOutcome(
                kind=REWARD,
                points=task.bonus_points,
                currency=task.bonus_currency,
                reason="completed_on_time",
            )
        return TaskOutcome(kind=NEUTRAL, reason="no_bonus_configured")

    if is_after(now, deadline):
        return penalty_for(task, reason="not_completed_deadline_passed")
    return TaskOutcome(kind=NEUTRAL, reason="not_completed")
