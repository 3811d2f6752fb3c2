from django.urls import include, path

from .routers import build_router
from .views.health_views import HealthCheckView

router = build_router()

urlpatterns = [
    path("healthz/", HealthCheckView.as_view(), name="healthz"),
    path("", include(router.urls)),
]
