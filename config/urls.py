from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .health import health_check

admin.site.site_header = "WorkNest Administration"
admin.site.site_title = "WorkNest Admin"
admin.site.index_title = "Engine management"

urlpatterns = [
    path("health/", health_check, name="health"),
    path("admin/", admin.site.urls),

    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),

    path("api/v1/auth/login/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("api/v1/auth/refresh/", TokenRefreshView.as_view(), name="token_refresh"),

    path("api/v1/tasks/", include("apps.tasks.urls")),
    path("api/v1/fines/", include("apps.fines.urls")),
    path("api/v1/payroll/", include("apps.payroll.urls")),
]
