from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import AdHocLedgerEntry, BonusFineRecord


User = get_user_model()


class PeriodQuerySerializer(serializers.Serializer):
    period = serializers.ChoiceField(choices=BonusFineRecord.Period.choices, default=BonusFineRecord.Period.MONTHLY)


class RecordListQuerySerializer(PeriodQuerySerializer):
    month = serializers.IntegerField(min_value=1, max_value=12, required=False)
    year = serializers.IntegerField(min_value=2000, max_value=2100, required=False)


class ComputeCompensationSerializer(PeriodQuerySerializer):
    employee_id = serializers.IntegerField(min_value=1, required=False)
    all_employees = serializers.BooleanField(default=False)

    def validate(self, attrs):
        if not attrs.get("all_employees") and not attrs.get("employee_id"):
            raise serializers.ValidationError("employee_id is required unless all_employees is set.")
        return attrs


class BonusFineRecordSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source="employee.username", read_only=True)

    class Meta:
        model = BonusFineRecord
        fields = (
            "id",
            "employee",
            "username",
            "period",
            "month",
            "year",
            "base_amount",
            "total_bonus",
            "total_fine",
            "grand_total_fine",
            "net_amount",
            "custom_fines_points",
            "custom_fines_currency",
            "manual_bonus",
            "manual_fine",
            "admin_notes",
            "approved_by_core_team",
            "breakdown",
            "computed_at",
            "updated_at",
        )
        read_only_fields = fields


class ManualOverrideSerializer(serializers.Serializer):
    # Negative values are rejected by the service with a typed error.
    manual_bonus = serializers.IntegerField(required=False, allow_null=True)
    manual_fine = serializers.IntegerField(required=False, allow_null=True)
    admin_notes = serializers.CharField(required=False, allow_blank=True)
    approved_by_core_team = serializers.BooleanField(required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Nothing to update.")
        return attrs


class AdHocLedgerEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = AdHocLedgerEntry
        fields = (
            "id",
            "employee",
            "date",
            "kind",
            "value_type",
            "value",
            "description",
            "source",
            "custom_fine_record",
            "created_by",
            "created_at",
        )
        read_only_fields = ("source", "custom_fine_record", "created_by", "created_at")


class LedgerEntryCreateSerializer(serializers.Serializer):
    employee = serializers.IntegerField(min_value=1)
    date = serializers.DateField()
    kind = serializers.ChoiceField(choices=AdHocLedgerEntry.Kind.choices)
    value_type = serializers.ChoiceField(choices=AdHocLedgerEntry.ValueType.choices)
    value = serializers.IntegerField(min_value=1)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True)


class SignalSummaryQuerySerializer(serializers.Serializer):
    employee_id = serializers.IntegerField(min_value=1)
    start = serializers.DateField()
    end = serializers.DateField()

    def validate(self, attrs):
        if attrs["start"] > attrs["end"]:
            raise serializers.ValidationError("start must not be after end.")
        return attrs
