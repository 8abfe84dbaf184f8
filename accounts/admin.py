from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django.utils.html import format_html

from .models import AuditLog, Role, User


ROLE_BADGE_COLORS = {
    Role.Name.SUPER_ADMIN: "#d97706",
    Role.Name.ADMIN: "#2563eb",
    Role.Name.EMPLOYEE: "#059669",
}


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ("name", "level", "description")
    search_fields = ("name",)
    ordering = ("-level",)


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    list_display = ("username", "full_name_display", "role_badge", "date_joined", "is_active", "is_blocked")
    list_filter = ("role", "is_active", "is_blocked", "is_staff")
    search_fields = ("username", "first_name", "last_name", "email")
    ordering = ("id",)
    list_select_related = ("role",)
    autocomplete_fields = ("role",)
    readonly_fields = ("last_login",)
    filter_horizontal = ()

    fieldsets = (
        ("Account", {"fields": ("username", "password")}),
        ("Personal info", {"fields": ("first_name", "last_name", "email")}),
        ("Role", {"fields": ("role", "date_joined")}),
        ("Access", {"fields": ("is_active", "is_staff", "is_blocked")}),
        ("System fields", {"fields": ("last_login",), "classes": ("collapse",)}),
    )

    add_fieldsets = (
        (
            "New user",
            {
                "classes": ("wide",),
                "fields": (
                    "username",
                    "password1",
                    "password2",
                    "first_name",
                    "last_name",
                    "email",
                    "role",
                    "is_active",
                    "is_staff",
                ),
            },
        ),
    )

    @admin.display(description="Full name")
    def full_name_display(self, obj):
        return obj.get_full_name() or "-"

    @admin.display(description="Role")
    def role_badge(self, obj):
        color = ROLE_BADGE_COLORS.get(obj.role.name, "#6b7280")
        return format_html('<span style="color:{};font-weight:600">{}</span>', color, obj.role.name)


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "action", "user", "object_type", "object_id", "level", "category")
    list_filter = ("level", "category")
    search_fields = ("action", "object_type", "object_id", "user__username")
    readonly_fields = (
        "created_at",
        "action",
        "user",
        "object_type",
        "object_id",
        "level",
        "category",
        "ip_address",
        "metadata",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
