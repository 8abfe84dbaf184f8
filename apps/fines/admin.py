from django.contrib import admin

from .models import CustomFine, CustomFineRecord, DailyTaskNA, FineControlSettings


@admin.register(CustomFine)
class CustomFineAdmin(admin.ModelAdmin):
    list_display = ("id", "criteria", "fine_type", "fine_points", "fine_currency", "deadline_label", "is_active")
    list_filter = ("criteria", "fine_type", "is_active")
    filter_horizontal = ("employees", "projects")


@admin.register(CustomFineRecord)
class CustomFineRecordAdmin(admin.ModelAdmin):
    list_display = ("fine", "employee", "project", "date", "fine_currency", "manually_deleted")
    list_filter = ("criteria", "fine_type", "manually_deleted")
    search_fields = ("employee__username", "reason")
    readonly_fields = ("applied_at", "deleted_at", "deleted_by")


@admin.register(DailyTaskNA)
class DailyTaskNAAdmin(admin.ModelAdmin):
    list_display = ("employee", "project", "date")
    list_filter = ("date",)


@admin.register(FineControlSettings)
class FineControlSettingsAdmin(admin.ModelAdmin):
    list_display = ("__str__", "missing_daily_tasks_fine", "updated_at")

    def has_add_permission(self, request):
        return not FineControlSettings.objects.exists()
