from django.urls import path

from .views import (
    CompensationAdminAPIView,
    CompensationMyAPIView,
    CompensationOverrideAPIView,
    LedgerEntryAPIView,
    SignalSummaryAPIView,
)


urlpatterns = [
    path("compensation/", CompensationMyAPIView.as_view(), name="payroll-compensation-my"),
    path("admin/compensation/", CompensationAdminAPIView.as_view(), name="payroll-compensation-admin"),
    path(
        "admin/records/<int:record_id>/override/",
        CompensationOverrideAPIView.as_view(),
        name="payroll-record-override",
    ),
    path("admin/ledger/", LedgerEntryAPIView.as_view(), name="payroll-ledger"),
    path("admin/summary/", SignalSummaryAPIView.as_view(), name="payroll-signal-summary"),
]
