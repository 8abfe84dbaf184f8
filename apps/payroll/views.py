from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.exceptions import AuthorizationError, NotFoundError
from common.identifiers import normalize_id

from .audit import PayrollAuditService
from .models import AdHocLedgerEntry, BonusFineRecord
from .permissions import CanViewOwnCompensation, IsCompensationAdmin
from .policies import PayrollPolicy
from .serializers import (
    AdHocLedgerEntrySerializer,
    BonusFineRecordSerializer,
    ComputeCompensationSerializer,
    LedgerEntryCreateSerializer,
    ManualOverrideSerializer,
    PeriodQuerySerializer,
    RecordListQuerySerializer,
    SignalSummaryQuerySerializer,
)
from .services import CompensationService, LedgerService
from .summary import summarize_signals


User = get_user_model()


def _compensation_payload(result) -> dict:
    return {
        "record": BonusFineRecordSerializer(result.record).data,
        "breakdown": result.breakdown.as_dict(),
    }


class CompensationMyAPIView(APIView):
    permission_classes = [IsAuthenticated, CanViewOwnCompensation]

    def get(self, request):
        query = PeriodQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        result = CompensationService.compute_compensation(
            request.user.id,
            query.validated_data["period"],
            timezone.now(),
        )
        return Response(_compensation_payload(result), status=status.HTTP_200_OK)


class CompensationAdminAPIView(APIView):
    permission_classes = [IsAuthenticated, IsCompensationAdmin]

    def get(self, request):
        query = RecordListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        today = timezone.localdate()
        qs = BonusFineRecord.objects.select_related("employee").filter(
            period=query.validated_data["period"],
            month=query.validated_data.get("month", today.month),
            year=query.validated_data.get("year", today.year),
        )
        return Response(BonusFineRecordSerializer(qs.order_by("employee_id"), many=True).data)

    def post(self, request):
        serializer = ComputeCompensationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        period = serializer.validated_data["period"]
        now = timezone.now()

        if serializer.validated_data["all_employees"]:
            result = CompensationService.recalculate_all(period=period, now=now)
            PayrollAuditService.log_recalculated(request, period, result.created, result.updated)
            return Response(
                {"period": period, "records_created": result.created, "records_updated": result.updated},
                status=status.HTTP_200_OK,
            )

        result = CompensationService.compute_compensation(serializer.validated_data["employee_id"], period, now)
        PayrollAuditService.log_compensation_computed(request, result.record)
        return Response(_compensation_payload(result), status=status.HTTP_200_OK)


class CompensationOverrideAPIView(APIView):
    permission_classes = [IsAuthenticated, IsCompensationAdmin]

    def patch(self, request, record_id):
        record = BonusFineRecord.objects.filter(pk=normalize_id(record_id, field="record_id")).first()
        if record is None:
            raise NotFoundError("Compensation record not found.")
        if not PayrollPolicy.can_override(request.user, record):
            raise AuthorizationError("You cannot override your own compensation.")

        serializer = ManualOverrideSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = CompensationService.set_manual_override(record.id, serializer.validated_data, timezone.now())
        PayrollAuditService.log_override_set(request, result.record, serializer.validated_data)
        return Response(_compensation_payload(result), status=status.HTTP_200_OK)


class LedgerEntryAPIView(APIView):
    permission_classes = [IsAuthenticated, IsCompensationAdmin]

    def get(self, request):
        qs = AdHocLedgerEntry.objects.all()
        employee_id = request.query_params.get("employee_id")
        if employee_id:
            qs = qs.filter(employee_id=normalize_id(employee_id, field="employee_id"))
        return Response(AdHocLedgerEntrySerializer(qs[:500], many=True).data)

    def post(self, request):
        serializer = LedgerEntryCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        entry = LedgerService.create_entry(request.user, serializer.validated_data)
        PayrollAuditService.log_ledger_entry(request, entry)
        return Response(AdHocLedgerEntrySerializer(entry).data, status=status.HTTP_201_CREATED)


class SignalSummaryAPIView(APIView):
    permission_classes = [IsAuthenticated, IsCompensationAdmin]

    def get(self, request):
        query = SignalSummaryQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        employee = User.objects.filter(pk=query.validated_data["employee_id"]).first()
        if employee is None:
            raise NotFoundError("Employee not found.")
        summary = summarize_signals(
            employee,
            query.validated_data["start"],
            query.validated_data["end"],
            timezone.now(),
        )
        return Response(
            {
                "employee_id": employee.id,
                "start": query.validated_data["start"].isoformat(),
                "end": query.validated_data["end"].isoformat(),
                **summary.as_dict(),
            },
            status=status.HTTP_200_OK,
        )
