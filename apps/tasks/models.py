from django.conf import settings
from django.db import models
from django.utils import timezone


class Task(models.Model):
    class Kind(models.TextChoices):
        ONE_TIME = "one-time", "One-time"
        DAILY = "daily", "Daily"
        WEEKLY = "weekly", "Weekly"
        MONTHLY = "monthly", "Monthly"
        CUSTOM = "custom", "Custom"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        IN_PROGRESS = "in_progress", "In progress"
        COMPLETED = "completed", "Completed"
        OVERDUE = "overdue", "Overdue"
        CANCELLED = "cancelled", "Cancelled"

    class ApprovalStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"
        DEADLINE_PASSED = "deadline_passed", "Deadline passed"

    RECURRING_KINDS = (Kind.DAILY, Kind.WEEKLY, Kind.MONTHLY, Kind.CUSTOM)
    REWARD_FIELDS = ("bonus_points", "bonus_currency", "penalty_points", "penalty_currency")

    project = models.ForeignKey(
        "projects.Project",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="tasks",
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    kind = models.CharField(max_length=20, choices=Kind.choices, default=Kind.ONE_TIME)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    approval_status = models.CharField(
        max_length=20,
        choices=ApprovalStatus.choices,
        default=ApprovalStatus.PENDING,
    )
    assignee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="assigned_tasks",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_tasks",
    )

    assigned_date = models.DateField(null=True, blank=True)
    assigned_time = models.TimeField(null=True, blank=True)
    due_date = models.DateField(null=True, blank=True)
    due_time = models.TimeField(null=True, blank=True)
    deadline_date = models.DateField(null=True, blank=True)
    deadline_time = models.TimeField(null=True, blank=True)

    bonus_points = models.PositiveIntegerField(default=0)
    bonus_currency = models.PositiveIntegerField(default=0)
    penalty_points = models.PositiveIntegerField(default=0)
    penalty_currency = models.PositiveIntegerField(default=0)

    recurrence = models.JSONField(default=dict, blank=True)
    cycle_date = models.DateField(null=True, blank=True, help_text="First day of the current recurrence cycle.")
    not_applicable = models.BooleanField(default=False)

    completed_at = models.DateTimeField(null=True, blank=True)
    completed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="completed_tasks",
    )
    ticked_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approved_tasks",
    )
    approved_at = models.DateTimeField(null=True, blank=True)

    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["assignee"], name="tasks_assignee_idx"),
            models.Index(fields=["project", "created_by", "created_at"], name="tasks_project_creator_idx"),
            models.Index(fields=["kind", "status"], name="tasks_kind_status_idx"),
            models.Index(fields=["approval_status"], name="tasks_approval_status_idx"),
        ]

    def __str__(self):
        return self.title

    @property
    def is_recurring(self) -> bool:
        return self.kind in self.RECURRING_KINDS

    @property
    def is_completed(self) -> bool:
        return self.status == self.Status.COMPLETED


class Subtask(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        COMPLETED = "completed", "Completed"

    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name="subtasks")
    title = models.CharField(max_length=255)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["order", "id"]

    def __str__(self):
        return f"{self.task_id}:{self.title}"


class TaskCompletion(models.Model):
    """Immutable snapshot of one closed recurrence cycle."""

    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name="completions")
    cycle_date = models.DateField()
    title = models.CharField(max_length=255)
    kind = models.CharField(max_length=20, choices=Task.Kind.choices)
    project = models.ForeignKey(
        "projects.Project",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="task_completions",
    )
    assignee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="task_completions",
    )
    status = models.CharField(max_length=20, choices=Task.Status.choices)
    approval_status = models.CharField(max_length=20, choices=Task.ApprovalStatus.choices)
    effective_deadline = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    completed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    ticked_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    bonus_points = models.PositiveIntegerField(default=0)
    bonus_currency = models.PositiveIntegerField(default=0)
    penalty_points = models.PositiveIntegerField(default=0)
    penalty_currency = models.PositiveIntegerField(default=0)
    archived_at = models.DateTimeField()

    class Meta:
        ordering = ["-cycle_date", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["task", "cycle_date"], name="tasks_unique_completion_task_cycle"),
        ]

    def __str__(self):
        return f"{self.task_id}@{self.cycle_date}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError("TaskCompletion snapshots are immutable.")
        super().save(*args, **kwargs)
