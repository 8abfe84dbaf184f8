from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.exceptions import AuthorizationError

from .audit import TasksAuditService
from .models import TaskCompletion
from .permissions import IsTaskAdmin
from .policies import TaskPolicy
from .recurrence import RecurrenceArchiver
from .serializers import (
    RecurringResetSerializer,
    TaskCompletionSerializer,
    TaskSerializer,
    TaskTransitionSerializer,
    TaskWriteSerializer,
)
from .services import TaskLifecycleService


def _visible_task(request, pk):
    task = TaskLifecycleService.get_task(pk)
    if not TaskPolicy.can_view_task(request.user, task):
        raise AuthorizationError()
    return task


class TaskCreateAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = TaskWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        task = TaskLifecycleService.create_task(request.user, serializer.validated_data, timezone.now())
        TasksAuditService.log_task_created(request, task)
        return Response(TaskSerializer(task).data, status=status.HTTP_201_CREATED)


class TaskDetailAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        return Response(TaskSerializer(_visible_task(request, pk)).data)

    def patch(self, request, pk):
        serializer = TaskWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            result = TaskLifecycleService.update_task(pk, request.user, serializer.validated_data, timezone.now())
        except AuthorizationError as exc:
            TasksAuditService.log_update_denied(request, pk, exc.field)
            raise
        if result.changed_fields:
            TasksAuditService.log_task_updated(request, result.task, result.changed_fields)
        return Response(TaskSerializer(result.task).data)


class TaskTransitionAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        serializer = TaskTransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        action = serializer.validated_data["action"]

        result = TaskLifecycleService.transition_task(pk, action, request.user, timezone.now())
        TasksAuditService.log_transition(request, result.task, action, result.outcome)

        payload = TaskSerializer(result.task).data
        if result.outcome is not None:
            payload["outcome"] = result.outcome.as_dict()
        return Response(payload)


class TaskCompletionListAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        task = _visible_task(request, pk)
        qs = TaskCompletion.objects.filter(task=task)
        return Response(TaskCompletionSerializer(qs, many=True).data)


class TaskDeadlineSweepAPIView(APIView):
    permission_classes = [IsAuthenticated, IsTaskAdmin]

    def post(self, request):
        marked = TaskLifecycleService.sweep_deadlines(timezone.now())
        TasksAuditService.log_deadline_sweep(request, marked)
        return Response({"marked": marked})


class RecurringTaskResetAPIView(APIView):
    permission_classes = [IsAuthenticated, IsTaskAdmin]

    def post(self, request):
        serializer = RecurringResetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        kind = serializer.validated_data.get("kind")
        result = RecurrenceArchiver.archive_closed_cycles(now=timezone.now(), kind=kind)
        TasksAuditService.log_recurrence_run(request, kind, result)
        return Response({"archived": result.archived, "reset": result.reset, "skipped": result.skipped})
