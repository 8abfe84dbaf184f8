from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.tasks.audit import TasksAuditService
from apps.tasks.models import Task
from apps.tasks.recurrence import RecurrenceArchiver


class Command(BaseCommand):
    help = "Archive closed recurring task cycles and reset the tasks for the current cycle."

    def add_arguments(self, parser):
        parser.add_argument(
            "--kind",
            choices=[str(kind) for kind in Task.RECURRING_KINDS],
            help="Only process one recurrence kind.",
        )

    def handle(self, *args, **options):
        kind = options.get("kind")
        result = RecurrenceArchiver.archive_closed_cycles(now=timezone.now(), kind=kind)
        TasksAuditService.log_recurrence_run(None, kind, result)
        self.stdout.write(
            self.style.SUCCESS(
                f"Recurring tasks processed ({kind or 'all'}). "
                f"archived={result.archived}, reset={result.reset}, skipped={result.skipped}"
            )
        )
