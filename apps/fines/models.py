from django.conf import settings
from django.core.validators import MaxValueValidator
from django.db import models
from django.db.models import Q


class CustomFine(models.Model):
    class Criteria(models.TextChoices):
        DEFAULT_FINE = "default_fine", "Default fine"
        LEAD_NO_TASK_CREATED = "lead_assignee_no_task_created", "Lead assignee - no task created"

    class FineType(models.TextChoices):
        ONE_TIME = "one-time", "One-time"
        DAILY = "daily", "Daily"

    criteria = models.CharField(max_length=40, choices=Criteria.choices)
    fine_type = models.CharField(max_length=10, choices=FineType.choices, default=FineType.ONE_TIME)
    description = models.TextField(blank=True)
    employees = models.ManyToManyField(settings.AUTH_USER_MODEL, related_name="custom_fines")
    projects = models.ManyToManyField("projects.Project", blank=True, related_name="custom_fines")
    fine_points = models.PositiveIntegerField(default=0)
    fine_currency = models.PositiveIntegerField(default=0)
    time_hour = models.PositiveSmallIntegerField(null=True, blank=True, validators=[MaxValueValidator(23)])
    time_minute = models.PositiveSmallIntegerField(null=True, blank=True, validators=[MaxValueValidator(59)])
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.get_criteria_display()} #{self.pk}"

    @property
    def deadline_label(self) -> str:
        if self.time_hour is None or self.time_minute is None:
            return ""
        return f"{self.time_hour:02d}:{self.time_minute:02d}"


class CustomFineRecord(models.Model):
    fine = models.ForeignKey(CustomFine, on_delete=models.CASCADE, related_name="records")
    employee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="custom_fine_records",
    )
    project = models.ForeignKey(
        "projects.Project",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="custom_fine_records",
    )
    date = models.DateField()
    criteria = models.CharField(max_length=40, choices=CustomFine.Criteria.choices)
    fine_type = models.CharField(max_length=10, choices=CustomFine.FineType.choices)
    fine_points = models.PositiveIntegerField(default=0)
    fine_currency = models.PositiveIntegerField(default=0)
    reason = models.CharField(max_length=500, blank=True)
    applied_at = models.DateTimeField()
    manually_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)
    deleted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        ordering = ["-date", "-id"]
        indexes = [
            models.Index(fields=["employee", "date"], name="fines_record_emp_date_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["fine", "employee"],
                condition=Q(project__isnull=True, manually_deleted=False),
                name="fines_unique_active_employee",
            ),
            models.UniqueConstraint(
                fields=["fine", "employee", "project", "date"],
                condition=Q(fine_type="daily", project__isnull=False, manually_deleted=False),
                name="fines_unique_active_daily",
            ),
            models.UniqueConstraint(
                fields=["fine", "employee", "project"],
                condition=Q(fine_type="one-time", project__isnull=False, manually_deleted=False),
                name="fines_unique_active_one_time",
            ),
        ]

    def __str__(self):
        return f"{self.fine_id}:{self.employee_id}@{self.date}"


class DailyTaskNA(models.Model):
    """A lead's "no tasks needed today" mark for one project."""

    employee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="daily_task_na_marks",
    )
    project = models.ForeignKey("projects.Project", on_delete=models.CASCADE, related_name="daily_task_na_marks")
    date = models.DateField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["employee", "project", "date"], name="fines_unique_na_mark"),
        ]

    def __str__(self):
        return f"{self.employee_id}:{self.project_id}@{self.date}"


class FineControlSettings(models.Model):
    daily_tasks_deadline_hour = models.PositiveSmallIntegerField(default=10, validators=[MaxValueValidator(23)])
    daily_tasks_deadline_minute = models.PositiveSmallIntegerField(default=0, validators=[MaxValueValidator(59)])
    missing_daily_tasks_fine = models.PositiveIntegerField(default=500)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Fine control settings"
        verbose_name_plural = "Fine control settings"

    def __str__(self):
        return f"Daily tasks by {self.daily_tasks_deadline_hour:02d}:{self.daily_tasks_deadline_minute:02d}"

    @classmethod
    def get_solo(cls) -> "FineControlSettings":
        obj, _ = cls.objects.get_or_create(pk=1)
        return obj
