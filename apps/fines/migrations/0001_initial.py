import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


CRITERIA_CHOICES = [
    ("default_fine", "Default fine"),
    ("lead_assignee_no_task_created", "Lead assignee - no task created"),
]
FINE_TYPE_CHOICES = [("one-time", "One-time"), ("daily", "Daily")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("projects", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="CustomFine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("criteria", models.CharField(choices=CRITERIA_CHOICES, max_length=40)),
                ("fine_type", models.CharField(choices=FINE_TYPE_CHOICES, default="one-time", max_length=10)),
                ("description", models.TextField(blank=True)),
                ("fine_points", models.PositiveIntegerField(default=0)),
                ("fine_currency", models.PositiveIntegerField(default=0)),
                (
                    "time_hour",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        null=True,
                        validators=[django.core.validators.MaxValueValidator(23)],
                    ),
                ),
                (
                    "time_minute",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        null=True,
                        validators=[django.core.validators.MaxValueValidator(59)],
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                ("employees", models.ManyToManyField(related_name="custom_fines", to=settings.AUTH_USER_MODEL)),
                ("projects", models.ManyToManyField(blank=True, related_name="custom_fines", to="projects.project")),
            ],
            options={"ordering": ["-created_at", "-id"]},
        ),
        migrations.CreateModel(
            name="CustomFineRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("criteria", models.CharField(choices=CRITERIA_CHOICES, max_length=40)),
                ("fine_type", models.CharField(choices=FINE_TYPE_CHOICES, max_length=10)),
                ("fine_points", models.PositiveIntegerField(default=0)),
                ("fine_currency", models.PositiveIntegerField(default=0)),
                ("reason", models.CharField(blank=True, max_length=500)),
                ("applied_at", models.DateTimeField()),
                ("manually_deleted", models.BooleanField(default=False)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                (
                    "fine",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="records",
                        to="fines.customfine",
                    ),
                ),
                (
                    "employee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="custom_fine_records",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "project",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="custom_fine_records",
                        to="projects.project",
                    ),
                ),
                (
                    "deleted_by",
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
                "ordering": ["-date", "-id"],
                "indexes": [models.Index(fields=["employee", "date"], name="fines_record_emp_date_idx")],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("project__isnull", True), ("manually_deleted", False)),
                        fields=("fine", "employee"),
                        name="fines_unique_active_employee",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(
                            ("fine_type", "daily"),
                            ("project__isnull", False),
                            ("manually_deleted", False),
                        ),
                        fields=("fine", "employee", "project", "date"),
                        name="fines_unique_active_daily",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(
                            ("fine_type", "one-time"),
                            ("project__isnull", False),
                            ("manually_deleted", False),
                        ),
                        fields=("fine", "employee", "project"),
                        name="fines_unique_active_one_time",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="DailyTaskNA",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "employee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="daily_task_na_marks",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "project",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="daily_task_na_marks",
                        to="projects.project",
                    ),
                ),
            ],
            options={
                "ordering": ["-date", "-id"],
                "constraints": [
                    models.UniqueConstraint(fields=("employee", "project", "date"), name="fines_unique_na_mark"),
                ],
            },
        ),
        migrations.CreateModel(
            name="FineControlSettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "daily_tasks_deadline_hour",
                    models.PositiveSmallIntegerField(
                        default=10,
                        validators=[django.core.validators.MaxValueValidator(23)],
                    ),
                ),
                (
                    "daily_tasks_deadline_minute",
                    models.PositiveSmallIntegerField(
                        default=0,
                        validators=[django.core.validators.MaxValueValidator(59)],
                    ),
                ),
                ("missing_daily_tasks_fine", models.PositiveIntegerField(default=500)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Fine control settings",
                "verbose_name_plural": "Fine control settings",
            },
        ),
    ]
