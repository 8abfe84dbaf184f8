from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models

from .managers import UserManager


# ================= RBAC =================
class Role(models.Model):
    class Name(models.TextChoices):
        SUPER_ADMIN = "SUPER_ADMIN", "SuperAdmin"
        ADMIN = "ADMIN", "Admin"
        EMPLOYEE = "EMPLOYEE", "Employee"

    class Level(models.IntegerChoices):
        EMPLOYEE = 20, "Employee"
        ADMIN = 30, "Admin"
        SUPER_ADMIN = 40, "SuperAdmin"

    name = models.CharField("Name", max_length=50, unique=True)
    level = models.PositiveSmallIntegerField(
        "Level",
        choices=Level.choices,
        default=Level.EMPLOYEE,
    )
    description = models.TextField("Description", blank=True)

    class Meta:
        verbose_name = "Role"
        verbose_name_plural = "Roles"

    def __str__(self):
        return self.name


# ================= User =================
class User(AbstractUser):
    role = models.ForeignKey(Role, on_delete=models.PROTECT, verbose_name="System role")
    is_blocked = models.BooleanField("Blocked", default=False)

    objects = UserManager()

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"

    @property
    def is_admin_like(self) -> bool:
        if not self.role_id:
            return False
        return self.role.name in {Role.Name.ADMIN, Role.Name.SUPER_ADMIN}


# ================= Security =================
class AuditLog(models.Model):
    """
    Primary audit storage backend.
    Use apps.audit.log_event as unified entrypoint for new writes.
    """

    class Level(models.TextChoices):
        INFO = "info", "Info"
        WARNING = "warning", "Warning"
        ERROR = "error", "Error"
        CRITICAL = "critical", "Critical"

    class Category(models.TextChoices):
        AUTH = "auth", "Authentication"
        TASKS = "tasks", "Tasks"
        FINES = "fines", "Fines"
        PAYROLL = "payroll", "Payroll"
        SYSTEM = "system", "System"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        verbose_name="User",
    )

    action = models.CharField("Action", max_length=255)
    object_type = models.CharField("Object type", max_length=100, blank=True)
    object_id = models.CharField("Object ID", max_length=100, blank=True)

    level = models.CharField(
        "Level",
        max_length=20,
        choices=Level.choices,
        default=Level.INFO,
    )

    category = models.CharField(
        "Category",
        max_length=50,
        choices=Category.choices,
        default=Category.SYSTEM,
    )

    ip_address = models.GenericIPAddressField("IP address", null=True, blank=True)
    metadata = models.JSONField("Metadata", default=dict, blank=True)
    created_at = models.DateTimeField("Created at", auto_now_add=True)

    class Meta:
        verbose_name = "Audit log"
        verbose_name_plural = "Audit log"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["level"], name="accounts_au_level_6f0a1e_idx"),
            models.Index(fields=["category"], name="accounts_au_categor_0c2b7d_idx"),
            models.Index(fields=["created_at"], name="accounts_au_created_9d4e21_idx"),
            models.Index(fields=["user"], name="accounts_au_user_id_3b8f5c_idx"),
        ]

    @classmethod
    def log(
        cls,
        action,
        user=None,
        object_type="",
        object_id="",
        level=Level.INFO,
        category=Category.SYSTEM,
        ip_address=None,
        metadata=None,
    ):
        return cls.objects.create(
            user=user,
            action=action,
            object_type=object_type,
            object_id=object_id,
            level=level,
            category=category,
            ip_address=ip_address,
            metadata=metadata or {},
        )

    def __str__(self):
        return f"[{self.level.upper()}] {self.action}"
