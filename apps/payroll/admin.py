from django.contrib import admin

from .models import AdHocLedgerEntry, BonusFineRecord, ChecklistItemConfig, HackathonPrize
from .policies import PayrollPolicy


class CompensationAdminMixin:
    def has_module_permission(self, request):
        return PayrollPolicy.can_manage_compensation(request.user)

    def has_view_permission(self, request, obj=None):
        return PayrollPolicy.can_manage_compensation(request.user)


@admin.register(BonusFineRecord)
class BonusFineRecordAdmin(CompensationAdminMixin, admin.ModelAdmin):
    list_display = (
        "employee",
        "period",
        "year",
        "month",
        "total_bonus",
        "total_fine",
        "grand_total_fine",
        "net_amount",
        "approved_by_core_team",
    )
    list_filter = ("period", "year", "month", "approved_by_core_team")
    search_fields = ("employee__username",)
    readonly_fields = (
        "base_amount",
        "total_bonus",
        "total_fine",
        "grand_total_fine",
        "net_amount",
        "custom_fines_points",
        "custom_fines_currency",
        "breakdown",
        "computed_at",
        "created_at",
        "updated_at",
    )

    def has_add_permission(self, request):
        return False


@admin.register(AdHocLedgerEntry)
class AdHocLedgerEntryAdmin(CompensationAdminMixin, admin.ModelAdmin):
    list_display = ("employee", "date", "kind", "value_type", "value", "source")
    list_filter = ("kind", "value_type", "source")
    search_fields = ("employee__username", "description")
    readonly_fields = ("source", "custom_fine_record", "created_by", "created_at")

    def save_model(self, request, obj, form, change):
        if not change:
            obj.created_by = request.user
        super().save_model(request, obj, form, change)


@admin.register(ChecklistItemConfig)
class ChecklistItemConfigAdmin(CompensationAdminMixin, admin.ModelAdmin):
    list_display = ("label", "employee", "bonus_points", "bonus_currency", "fine_points", "fine_currency", "is_active")
    list_filter = ("is_active",)
    search_fields = ("label", "employee__username")


@admin.register(HackathonPrize)
class HackathonPrizeAdmin(CompensationAdminMixin, admin.ModelAdmin):
    list_display = ("title", "winner", "prize_points", "prize_currency", "declared_at")
    search_fields = ("title", "winner__username")
