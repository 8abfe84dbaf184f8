from django.urls import path

from .views import (
    ApplyCustomFinesAPIView,
    CustomFineDetailAPIView,
    CustomFineListCreateAPIView,
    CustomFineRecordDeleteAPIView,
    DailyTaskNAAPIView,
    FineControlSettingsAPIView,
)


urlpatterns = [
    path("", CustomFineListCreateAPIView.as_view(), name="fines-list"),
    path("<int:pk>/", CustomFineDetailAPIView.as_view(), name="fines-detail"),
    path("apply/", ApplyCustomFinesAPIView.as_view(), name="fines-apply"),
    path("records/<int:pk>/", CustomFineRecordDeleteAPIView.as_view(), name="fines-record-delete"),
    path("na/", DailyTaskNAAPIView.as_view(), name="fines-daily-task-na"),
    path("settings/", FineControlSettingsAPIView.as_view(), name="fines-settings"),
]
