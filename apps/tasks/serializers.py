from rest_framework import serializers

from .models import Subtask, Task, TaskCompletion
from .services import ACTIONS, LIFECYCLE_FIELDS


class SubtaskSerializer(serializers.ModelSerializer):
    class Meta:
        model = Subtask
        fields = ("id", "title", "status", "order")


class TaskSerializer(serializers.ModelSerializer):
    assignee_username = serializers.CharField(source="assignee.username", read_only=True)
    subtasks = SubtaskSerializer(many=True, read_only=True)

    class Meta:
        model = Task
        fields = (
            "id",
            "project",
            "title",
            "description",
            "kind",
            "status",
            "approval_status",
            "assignee",
            "assignee_username",
            "created_by",
            "assigned_date",
            "assigned_time",
            "due_date",
            "due_time",
            "deadline_date",
            "deadline_time",
            "bonus_points",
            "bonus_currency",
            "penalty_points",
            "penalty_currency",
            "recurrence",
            "cycle_date",
            "not_applicable",
            "completed_at",
            "completed_by",
            "ticked_at",
            "approved_by",
            "approved_at",
            "version",
            "subtasks",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class TaskWriteSerializer(serializers.Serializer):
    """Shape check only; ownership and field permissions live in the service."""

    title = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    kind = serializers.ChoiceField(choices=Task.Kind.choices, required=False)
    project = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    assignee = serializers.IntegerField(required=False, min_value=1)
    assigned_date = serializers.DateField(required=False, allow_null=True)
    assigned_time = serializers.TimeField(required=False, allow_null=True)
    due_date = serializers.DateField(required=False, allow_null=True)
    due_time = serializers.TimeField(required=False, allow_null=True)
    deadline_date = serializers.DateField(required=False, allow_null=True)
    deadline_time = serializers.TimeField(required=False, allow_null=True)
    bonus_points = serializers.IntegerField(required=False, min_value=0)
    bonus_currency = serializers.IntegerField(required=False, min_value=0)
    penalty_points = serializers.IntegerField(required=False, min_value=0)
    penalty_currency = serializers.IntegerField(required=False, min_value=0)
    recurrence = serializers.JSONField(required=False)
    not_applicable = serializers.BooleanField(required=False)

    def validate(self, attrs):
        locked = sorted(set(self.initial_data) & set(LIFECYCLE_FIELDS))
        if locked:
            raise serializers.ValidationError(
                {name: "Changes only through tick, untick, approve or reject." for name in locked}
            )
        return attrs


class TaskTransitionSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=ACTIONS)


class RecurringResetSerializer(serializers.Serializer):
    kind = serializers.ChoiceField(choices=Task.RECURRING_KINDS, required=False, allow_null=True)


class TaskCompletionSerializer(serializers.ModelSerializer):
    class Meta:
        model = TaskCompletion
        fields = (
            "id",
            "task",
            "cycle_date",
            "title",
            "kind",
            "project",
            "assignee",
            "status",
            "approval_status",
            "effective_deadline",
            "completed_at",
            "completed_by",
            "ticked_at",
            "approved_by",
            "approved_at",
            "bonus_points",
            "bonus_currency",
            "penalty_points",
            "penalty_currency",
            "archived_at",
        )
        read_only_fields = fields
