import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("fines", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="BonusFineRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "period",
                    models.CharField(
                        choices=[("monthly", "Monthly"), ("weekly", "Weekly")],
                        default="monthly",
                        max_length=10,
                    ),
                ),
                ("month", models.PositiveSmallIntegerField()),
                ("year", models.PositiveSmallIntegerField()),
                ("base_amount", models.IntegerField(default=0)),
                ("total_bonus", models.IntegerField(default=0)),
                ("total_fine", models.IntegerField(default=0)),
                ("grand_total_fine", models.IntegerField(default=0)),
                ("net_amount", models.IntegerField(default=0)),
                ("breakdown", models.JSONField(blank=True, default=dict)),
                ("custom_fines_points", models.IntegerField(default=0)),
                ("custom_fines_currency", models.IntegerField(default=0)),
                ("manual_bonus", models.IntegerField(blank=True, null=True)),
                ("manual_fine", models.IntegerField(blank=True, null=True)),
                ("admin_notes", models.TextField(blank=True)),
                ("approved_by_core_team", models.BooleanField(default=False)),
                ("computed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "employee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bonus_fine_records",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-year", "-month", "employee_id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("employee", "period", "month", "year"),
                        name="payroll_unique_record_period",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="AdHocLedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("kind", models.CharField(choices=[("bonus", "Bonus"), ("fine", "Fine")], max_length=10)),
                (
                    "value_type",
                    models.CharField(choices=[("points", "Points"), ("currency", "Currency")], max_length=10),
                ),
                ("value", models.PositiveIntegerField()),
                ("description", models.CharField(blank=True, max_length=500)),
                (
                    "source",
                    models.CharField(
                        choices=[("manual", "Manual"), ("custom_fine", "Custom fine")],
                        default="manual",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "employee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ledger_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "custom_fine_record",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ledger_entries",
                        to="fines.customfinerecord",
                    ),
                ),
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
            ],
            options={
                "ordering": ["-date", "-id"],
                "indexes": [models.Index(fields=["employee", "date"], name="payroll_ledger_emp_date_idx")],
            },
        ),
        migrations.CreateModel(
            name="ChecklistItemConfig",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("label", models.CharField(max_length=255)),
                ("bonus_points", models.PositiveIntegerField(default=0)),
                ("bonus_currency", models.PositiveIntegerField(default=0)),
                ("fine_points", models.PositiveIntegerField(default=0)),
                ("fine_currency", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
                (
                    "employee",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="checklist_configs",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={"ordering": ["label", "id"]},
        ),
        migrations.CreateModel(
            name="HackathonPrize",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("prize_points", models.PositiveIntegerField(default=0)),
                ("prize_currency", models.PositiveIntegerField(default=0)),
                ("declared_at", models.DateTimeField()),
                (
                    "winner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="hackathon_prizes",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={"ordering": ["-declared_at", "-id"]},
        ),
    ]
