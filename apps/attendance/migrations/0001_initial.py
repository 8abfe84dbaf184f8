import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("projects", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="AttendanceMark",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("present", "Present"),
                            ("remote", "Remote"),
                            ("vacation", "Vacation"),
                            ("sick", "Sick"),
                            ("absent", "Absent"),
                        ],
                        default="present",
                        max_length=20,
                    ),
                ),
                (
                    "hours_worked",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Leave empty for a standard 8 hour day.",
                        max_digits=5,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                ("comment", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="attendance_marks",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-date", "user_id"],
                "indexes": [
                    models.Index(fields=["user", "date"], name="attendance_user_date_idx"),
                    models.Index(fields=["status"], name="attendance_status_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("user", "date"), name="attendance_unique_mark_user_date"),
                ],
            },
        ),
        migrations.CreateModel(
            name="DailyUpdate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("recorded_loom_videos", models.BooleanField(default=False)),
                ("updated_daily_progress", models.BooleanField(default=False)),
                ("admin_approved", models.BooleanField(default=False)),
                (
                    "checklist",
                    models.JSONField(blank=True, default=list, help_text='List of {"label": str, "checked": bool}.'),
                ),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "employee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="daily_updates",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "project",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="daily_updates",
                        to="projects.project",
                    ),
                ),
            ],
            options={
                "ordering": ["-date", "-id"],
                "indexes": [
                    models.Index(fields=["employee", "date"], name="daily_update_emp_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="MissedMeeting",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                (
                    "kind",
                    models.CharField(
                        choices=[("team", "Team"), ("internal", "Internal"), ("client", "Client")],
                        max_length=20,
                    ),
                ),
                ("note", models.CharField(blank=True, max_length=255)),
                (
                    "employee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="missed_meetings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-date", "-id"],
                "indexes": [
                    models.Index(fields=["employee", "date"], name="missed_meeting_emp_date_idx"),
                ],
            },
        ),
    ]
