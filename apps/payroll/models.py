from django.conf import settings
from django.db import models
from django.db.models import F, Value
from django.db.models.functions import Greatest


class BonusFineRecord(models.Model):
    class Period(models.TextChoices):
        MONTHLY = "monthly", "Monthly"
        WEEKLY = "weekly", "Weekly"

    employee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bonus_fine_records",
    )
    period = models.CharField(max_length=10, choices=Period.choices, default=Period.MONTHLY)
    month = models.PositiveSmallIntegerField()
    year = models.PositiveSmallIntegerField()

    base_amount = models.IntegerField(default=0)
    total_bonus = models.IntegerField(default=0)
    total_fine = models.IntegerField(default=0)
    grand_total_fine = models.IntegerField(default=0)
    net_amount = models.IntegerField(default=0)
    breakdown = models.JSONField(default=dict, blank=True)

    # Running totals of scheduled custom fines for the month.
    custom_fines_points = models.IntegerField(default=0)
    custom_fines_currency = models.IntegerField(default=0)

    manual_bonus = models.IntegerField(null=True, blank=True)
    manual_fine = models.IntegerField(null=True, blank=True)
    admin_notes = models.TextField(blank=True)
    approved_by_core_team = models.BooleanField(default=False)

    computed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-year", "-month", "employee_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["employee", "period", "month", "year"],
                name="payroll_unique_record_period",
            ),
        ]

    def __str__(self):
        return f"{self.employee_id} {self.period} {self.year}-{self.month:02d}"

    @classmethod
    def add_custom_fine(cls, *, employee_id: int, day, points: int, currency: int) -> None:
        """Shift the monthly custom-fine running totals; negative amounts never push them below zero."""
        record, _ = cls.objects.get_or_create(
            employee_id=employee_id,
            period=cls.Period.MONTHLY,
            month=day.month,
            year=day.year,
        )
        cls.objects.filter(pk=record.pk).update(
            custom_fines_points=Greatest(F("custom_fines_points") + points, Value(0)),
            custom_fines_currency=Greatest(F("custom_fines_currency") + currency, Value(0)),
        )


class AdHocLedgerEntry(models.Model):
    class Kind(models.TextChoices):
        BONUS = "bonus", "Bonus"
        FINE = "fine", "Fine"

    class ValueType(models.TextChoices):
        POINTS = "points", "Points"
        CURRENCY = "currency", "Currency"

    class Source(models.TextChoices):
        MANUAL = "manual", "Manual"
        CUSTOM_FINE = "custom_fine", "Custom fine"

    employee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="ledger_entries",
    )
    date = models.DateField()
    kind = models.CharField(max_length=10, choices=Kind.choices)
    value_type = models.CharField(max_length=10, choices=ValueType.choices)
    value = models.PositiveIntegerField()
    description = models.CharField(max_length=500, blank=True)
    source = models.CharField(max_length=20, choices=Source.choices, default=Source.MANUAL)
    custom_fine_record = models.ForeignKey(
        "fines.CustomFineRecord",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="ledger_entries",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-id"]
        indexes = [
            models.Index(fields=["employee", "date"], name="payroll_ledger_emp_date_idx"),
        ]

    def __str__(self):
        return f"{self.kind} {self.value} {self.value_type}"


class ChecklistItemConfig(models.Model):
    """Reward/fine for one daily checklist label; an employee-specific row beats the global one."""

    label = models.CharField(max_length=255)
    employee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="checklist_configs",
    )
    bonus_points = models.PositiveIntegerField(default=0)
    bonus_currency = models.PositiveIntegerField(default=0)
    fine_points = models.PositiveIntegerField(default=0)
    fine_currency = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["label", "id"]

    def __str__(self):
        return self.label


class HackathonPrize(models.Model):
    winner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="hackathon_prizes",
    )
    title = models.CharField(max_length=255)
    prize_points = models.PositiveIntegerField(default=0)
    prize_currency = models.PositiveIntegerField(default=0)
    declared_at = models.DateTimeField()

    class Meta:
        ordering = ["-declared_at", "-id"]

    def __str__(self):
        return self.title
