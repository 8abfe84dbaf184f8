from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.exceptions import NotFoundError
from common.identifiers import normalize_id

from .audit import FinesAuditService
from .models import CustomFine, FineControlSettings
from .permissions import CanMarkDailyTaskNA, IsFineAdmin
from .serializers import (
    ApplyFinesSerializer,
    CustomFineRecordSerializer,
    CustomFineSerializer,
    DailyTaskNASerializer,
    FineControlSettingsSerializer,
    MarkNASerializer,
)
from .services import CustomFineRecordService, CustomFineScheduler, DailyTaskNAService


class CustomFineListCreateAPIView(APIView):
    permission_classes = [IsAuthenticated, IsFineAdmin]

    def get(self, request):
        qs = CustomFine.objects.prefetch_related("employees", "projects")
        return Response(CustomFineSerializer(qs, many=True).data)

    def post(self, request):
        serializer = CustomFineSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        fine = serializer.save(created_by=request.user)
        FinesAuditService.log_fine_saved(request, fine, created=True)
        return Response(CustomFineSerializer(fine).data, status=status.HTTP_201_CREATED)


class CustomFineDetailAPIView(APIView):
    permission_classes = [IsAuthenticated, IsFineAdmin]

    def patch(self, request, pk):
        fine = CustomFine.objects.filter(pk=normalize_id(pk)).first()
        if fine is None:
            raise NotFoundError("Custom fine not found.")
        serializer = CustomFineSerializer(fine, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        fine = serializer.save()
        FinesAuditService.log_fine_saved(request, fine, created=False)
        return Response(CustomFineSerializer(fine).data)


class ApplyCustomFinesAPIView(APIView):
    permission_classes = [IsAuthenticated, IsFineAdmin]

    def post(self, request):
        serializer = ApplyFinesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        fine_id = serializer.validated_data.get("fine_id")
        result = CustomFineScheduler.apply_custom_fines(now=timezone.now(), fine_id=fine_id)
        FinesAuditService.log_run(request, result, fine_id)
        return Response({"applied": result.applied, "skipped": result.skipped})


class CustomFineRecordDeleteAPIView(APIView):
    permission_classes = [IsAuthenticated, IsFineAdmin]

    def delete(self, request, pk):
        record = CustomFineRecordService.delete_record(pk, request.user, timezone.now())
        FinesAuditService.log_record_deleted(request, record)
        return Response(CustomFineRecordSerializer(record).data)


class DailyTaskNAAPIView(APIView):
    permission_classes = [IsAuthenticated, CanMarkDailyTaskNA]

    def post(self, request):
        serializer = MarkNASerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        mark, created = DailyTaskNAService.mark_na(request.user, serializer.validated_data["project_id"], timezone.now())
        if created:
            FinesAuditService.log_na_marked(request, mark)
        return Response(
            DailyTaskNASerializer(mark).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class FineControlSettingsAPIView(APIView):
    permission_classes = [IsAuthenticated, IsFineAdmin]

    def get(self, request):
        return Response(FineControlSettingsSerializer(FineControlSettings.get_solo()).data)

    def patch(self, request):
        serializer = FineControlSettingsSerializer(FineControlSettings.get_solo(), data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)
