import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


KIND_CHOICES = [
    ("one-time", "One-time"),
    ("daily", "Daily"),
    ("weekly", "Weekly"),
    ("monthly", "Monthly"),
    ("custom", "Custom"),
]
STATUS_CHOICES = [
    ("pending", "Pending"),
    ("in_progress", "In progress"),
    ("completed", "Completed"),
    ("overdue", "Overdue"),
    ("cancelled", "Cancelled"),
]
APPROVAL_CHOICES = [
    ("pending", "Pending"),
    ("approved", "Approved"),
    ("rejected", "Rejected"),
    ("deadline_passed", "Deadline passed"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("projects", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Task",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("kind", models.CharField(choices=KIND_CHOICES, default="one-time", max_length=20)),
                ("status", models.CharField(choices=STATUS_CHOICES, default="pending", max_length=20)),
                ("approval_status", models.CharField(choices=APPROVAL_CHOICES, default="pending", max_length=20)),
                ("assigned_date", models.DateField(blank=True, null=True)),
                ("assigned_time", models.TimeField(blank=True, null=True)),
                ("due_date", models.DateField(blank=True, null=True)),
                ("due_time", models.TimeField(blank=True, null=True)),
                ("deadline_date", models.DateField(blank=True, null=True)),
                ("deadline_time", models.TimeField(blank=True, null=True)),
                ("bonus_points", models.PositiveIntegerField(default=0)),
                ("bonus_currency", models.PositiveIntegerField(default=0)),
                ("penalty_points", models.PositiveIntegerField(default=0)),
                ("penalty_currency", models.PositiveIntegerField(default=0)),
                ("recurrence", models.JSONField(blank=True, default=dict)),
                (
                    "cycle_date",
                    models.DateField(blank=True, help_text="First day of the current recurrence cycle.", null=True),
                ),
                ("not_applicable", models.BooleanField(default=False)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("ticked_at", models.DateTimeField(blank=True, null=True)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("version", models.PositiveIntegerField(default=1)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "project",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tasks",
                        to="projects.project",
                    ),
                ),
                (
                    "assignee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="assigned_tasks",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_tasks",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "completed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="completed_tasks",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="approved_tasks",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["assignee"], name="tasks_assignee_idx"),
                    models.Index(fields=["project", "created_by", "created_at"], name="tasks_project_creator_idx"),
                    models.Index(fields=["kind", "status"], name="tasks_kind_status_idx"),
                    models.Index(fields=["approval_status"], name="tasks_approval_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Subtask",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("completed", "Completed")],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("order", models.PositiveIntegerField(default=0)),
                (
                    "task",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="subtasks",
                        to="tasks.task",
                    ),
                ),
            ],
            options={"ordering": ["order", "id"]},
        ),
        migrations.CreateModel(
            name="TaskCompletion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("cycle_date", models.DateField()),
                ("title", models.CharField(max_length=255)),
                ("kind", models.CharField(choices=KIND_CHOICES, max_length=20)),
                ("status", models.CharField(choices=STATUS_CHOICES, max_length=20)),
                ("approval_status", models.CharField(choices=APPROVAL_CHOICES, max_length=20)),
                ("effective_deadline", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("ticked_at", models.DateTimeField(blank=True, null=True)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("bonus_points", models.PositiveIntegerField(default=0)),
                ("bonus_currency", models.PositiveIntegerField(default=0)),
                ("penalty_points", models.PositiveIntegerField(default=0)),
                ("penalty_currency", models.PositiveIntegerField(default=0)),
                ("archived_at", models.DateTimeField()),
                (
                    "task",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="completions",
                        to="tasks.task",
                    ),
                ),
                (
                    "project",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="task_completions",
                        to="projects.project",
                    ),
                ),
                (
                    "assignee",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="task_completions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "completed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-cycle_date", "-id"],
                "constraints": [
                    models.UniqueConstraint(fields=("task", "cycle_date"), name="tasks_unique_completion_task_cycle"),
                ],
            },
        ),
    ]
