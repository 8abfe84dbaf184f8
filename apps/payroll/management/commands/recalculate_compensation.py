from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.payroll.audit import PayrollAuditService
from apps.payroll.models import BonusFineRecord
from apps.payroll.services import CompensationService


class Command(BaseCommand):
    help = "Recompute compensation records for every active employee."

    def add_arguments(self, parser):
        parser.add_argument(
            "--period",
            choices=BonusFineRecord.Period.values,
            default=BonusFineRecord.Period.MONTHLY,
        )

    def handle(self, *args, **options):
        period = options["period"]
        result = CompensationService.recalculate_all(period=period, now=timezone.now())
        PayrollAuditService.log_recalculated(None, period, result.created, result.updated)
        self.stdout.write(
            self.style.SUCCESS(
                f"Compensation recalculated for {period}. created={result.created}, updated={result.updated}"
            )
        )
