from django.contrib import admin

from .models import AttendanceMark, DailyUpdate, MissedMeeting


@admin.register(AttendanceMark)
class AttendanceMarkAdmin(admin.ModelAdmin):
    list_display = ("user", "date", "status", "hours_worked")
    list_filter = ("status", "date")
    search_fields = ("user__username",)
    autocomplete_fields = ("user",)
    date_hierarchy = "date"


@admin.register(DailyUpdate)
class DailyUpdateAdmin(admin.ModelAdmin):
    list_display = ("employee", "date", "project", "recorded_loom_videos", "updated_daily_progress", "admin_approved")
    list_filter = ("admin_approved", "recorded_loom_videos", "updated_daily_progress")
    search_fields = ("employee__username",)
    autocomplete_fields = ("employee",)
    date_hierarchy = "date"


@admin.register(MissedMeeting)
class MissedMeetingAdmin(admin.ModelAdmin):
    list_display = ("employee", "date", "kind", "note")
    list_filter = ("kind",)
    search_fields = ("employee__username",)
    autocomplete_fields = ("employee",)
