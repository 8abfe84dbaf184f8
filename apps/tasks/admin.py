from django.contrib import admin

from .models import Subtask, Task, TaskCompletion


class SubtaskInline(admin.TabularInline):
    model = Subtask
    extra = 0


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ("title", "kind", "status", "approval_status", "assignee", "project", "cycle_date", "version")
    list_filter = ("kind", "status", "approval_status")
    search_fields = ("title", "assignee__username")
    readonly_fields = ("version", "created_at", "updated_at")
    inlines = [SubtaskInline]


@admin.register(TaskCompletion)
class TaskCompletionAdmin(admin.ModelAdmin):
    list_display = ("task", "cycle_date", "status", "approval_status", "archived_at")
    list_filter = ("kind", "approval_status")
    search_fields = ("title",)

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
