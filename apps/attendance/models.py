from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class AttendanceMark(models.Model):
    class Status(models.TextChoices):
        PRESENT = "present", "Present"
        REMOTE = "remote", "Remote"
        VACATION = "vacation", "Vacation"
        SICK = "sick", "Sick"
        ABSENT = "absent", "Absent"

    PRESENT_STATUSES = (Status.PRESENT, Status.REMOTE)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="attendance_marks",
    )
    date = models.DateField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PRESENT)
    hours_worked = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
        help_text="Leave empty for a standard 8 hour day.",
    )
    comment = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date", "user_id"]
        constraints = [
            models.UniqueConstraint(fields=["user", "date"], name="attendance_unique_mark_user_date"),
        ]
        indexes = [
            models.Index(fields=["user", "date"], name="attendance_user_date_idx"),
            models.Index(fields=["status"], name="attendance_status_idx"),
        ]

    def __str__(self):
        return f"{self.user_id} {self.date} {self.status}"


class DailyUpdate(models.Model):
    employee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="daily_updates",
    )
    project = models.ForeignKey(
        "projects.Project",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="daily_updates",
    )
    date = models.DateField()
    recorded_loom_videos = models.BooleanField(default=False)
    updated_daily_progress = models.BooleanField(default=False)
    admin_approved = models.BooleanField(default=False)
    checklist = models.JSONField(default=list, blank=True, help_text='List of {"label": str, "checked": bool}.')
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-id"]
        indexes = [
            models.Index(fields=["employee", "date"], name="daily_update_emp_date_idx"),
        ]

    def __str__(self):
        return f"{self.employee_id} {self.date}"

    @property
    def has_loom_and_gform(self) -> bool:
        return self.recorded_loom_videos and self.updated_daily_progress


class MissedMeeting(models.Model):
    class Kind(models.TextChoices):
        TEAM = "team", "Team"
        INTERNAL = "internal", "Internal"
        CLIENT = "client", "Client"

    employee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="missed_meetings",
    )
    date = models.DateField()
    kind = models.CharField(max_length=20, choices=Kind.choices)
    note = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ["-date", "-id"]
        indexes = [
            models.Index(fields=["employee", "date"], name="missed_meeting_emp_date_idx"),
        ]

    def __str__(self):
        return f"{self.employee_id} {self.date} {self.kind}"
