from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.tasks.audit import TasksAuditService
from apps.tasks.services import TaskLifecycleService


class Command(BaseCommand):
    help = "Mark pending tasks whose deadline has passed as deadline_passed."

    def handle(self, *args, **options):
        marked = TaskLifecycleService.sweep_deadlines(timezone.now())
        TasksAuditService.log_deadline_sweep(None, marked)
        self.stdout.write(self.style.SUCCESS(f"Deadline sweep finished. marked={marked}"))
