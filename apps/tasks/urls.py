from django.urls import path

from .views import (
    RecurringTaskResetAPIView,
    TaskCompletionListAPIView,
    TaskCreateAPIView,
    TaskDeadlineSweepAPIView,
    TaskDetailAPIView,
    TaskTransitionAPIView,
)


urlpatterns = [
    path("create/", TaskCreateAPIView.as_view(), name="tasks-create"),
    path("<int:pk>/", TaskDetailAPIView.as_view(), name="tasks-detail"),
    path("<int:pk>/transition/", TaskTransitionAPIView.as_view(), name="tasks-transition"),
    path("<int:pk>/completions/", TaskCompletionListAPIView.as_view(), name="tasks-completions"),
    path("admin/sweep-deadlines/", TaskDeadlineSweepAPIView.as_view(), name="tasks-sweep-deadlines"),
    path("admin/reset-recurring/", RecurringTaskResetAPIView.as_view(), name="tasks-reset-recurring"),
]
