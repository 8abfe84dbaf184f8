from django.core.management.base import BaseCommand

from accounts.models import Role


ROLES = {
    Role.Name.EMPLOYEE: (Role.Level.EMPLOYEE, "Employee"),
    Role.Name.ADMIN: (Role.Level.ADMIN, "Administrator"),
    Role.Name.SUPER_ADMIN: (Role.Level.SUPER_ADMIN, "System super administrator"),
}


class Command(BaseCommand):
    help = "Create or update the base roles."

    def handle(self, *args, **options):
        created = 0
        for name, (level, description) in ROLES.items():
            _, was_created = Role.objects.update_or_create(
                name=name,
                defaults={"level": level, "description": description},
            )
            if was_created:
                created += 1
        self.stdout.write(self.style.SUCCESS(f"Roles initialized. created={created}, total={len(ROLES)}"))
