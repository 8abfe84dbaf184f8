from django.contrib import admin

from .models import Project


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ("name", "status", "client_progress", "deadline", "assigned_at")
    list_filter = ("status",)
    search_fields = ("name",)
    filter_horizontal = ("lead_assignees",)
    autocomplete_fields = ("va_incharge", "update_incharge")
    readonly_fields = ("created_at", "updated_at")
