from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.fines.audit import FinesAuditService
from apps.fines.services import CustomFineScheduler


class Command(BaseCommand):
    help = "Apply active custom fines whose conditions are met."

    def add_arguments(self, parser):
        parser.add_argument("--fine-id", type=int, help="Apply a single custom fine.")

    def handle(self, *args, **options):
        fine_id = options.get("fine_id")
        result = CustomFineScheduler.apply_custom_fines(now=timezone.now(), fine_id=fine_id)
        FinesAuditService.log_run(None, result, fine_id)
        for entry in result.skipped:
            self.stdout.write(f"skipped fine={entry['fine_id']} employee={entry['employee_id']}: {entry['reason']}")
        self.stdout.write(
            self.style.SUCCESS(f"Custom fines processed. applied={len(result.applied)}, skipped={len(result.skipped)}")
        )
