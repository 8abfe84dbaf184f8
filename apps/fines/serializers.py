from django.contrib.auth import get_user_model
from rest_framework import serializers

from apps.projects.models import Project

from .models import CustomFine, CustomFineRecord, DailyTaskNA, FineControlSettings
from .services import validate_fine_definition


User = get_user_model()


class CustomFineSerializer(serializers.ModelSerializer):
    employees = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), many=True, allow_empty=False)
    projects = serializers.PrimaryKeyRelatedField(queryset=Project.objects.all(), many=True, required=False)
    applied_count = serializers.SerializerMethodField()

    class Meta:
        model = CustomFine
        fields = (
            "id",
            "criteria",
            "fine_type",
            "description",
            "employees",
            "projects",
            "fine_points",
            "fine_currency",
            "time_hour",
            "time_minute",
            "is_active",
            "applied_count",
            "created_by",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("created_by", "created_at", "updated_at")

    def get_applied_count(self, obj):
        return obj.records.filter(manually_deleted=False).count()

    def validate(self, attrs):
        return validate_fine_definition(attrs, self.instance)


class CustomFineRecordSerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomFineRecord
        fields = (
            "id",
            "fine",
            "employee",
            "project",
            "date",
            "criteria",
            "fine_type",
            "fine_points",
            "fine_currency",
            "reason",
            "applied_at",
            "manually_deleted",
            "deleted_at",
        )
        read_only_fields = fields


class ApplyFinesSerializer(serializers.Serializer):
    fine_id = serializers.IntegerField(required=False, min_value=1)


class DailyTaskNASerializer(serializers.ModelSerializer):
    class Meta:
        model = DailyTaskNA
        fields = ("id", "employee", "project", "date", "created_at")
        read_only_fields = fields


class MarkNASerializer(serializers.Serializer):
    project_id = serializers.IntegerField(min_value=1)


class FineControlSettingsSerializer(serializers.ModelSerializer):
    daily_tasks_deadline_hour = serializers.IntegerField(min_value=0, max_value=23, required=False)
    daily_tasks_deadline_minute = serializers.IntegerField(min_value=0, max_value=59, required=False)

    class Meta:
        model = FineControlSettings
        fields = ("daily_tasks_deadline_hour", "daily_tasks_deadline_minute", "missing_daily_tasks_fine", "updated_at")
        read_only_fields = ("updated_at",)
