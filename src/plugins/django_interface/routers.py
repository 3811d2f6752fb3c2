from rest_framework.routers import DefaultRouter

from .views.core_views import (
    PackageViewSet,
    PatientViewSet,
    SessionViewSet,
    TransactionViewSet,
)

UUID_REGEX = "[0-9a-fA-F-]{32,36}"

# lista de (rota, ViewSet)
RESOURCES = [
    ("patients",     PatientViewSet),
    ("packages",     PackageViewSet),
    ("sessions",     SessionViewSet),
    ("transactions", TransactionViewSet),
]

def build_router() -> DefaultRouter:
    router = DefaultRouter()
    for prefix, viewset in RESOURCES:
        viewset.lookup_value_regex = UUID_REGEX
        router.register(prefix, viewset, basename=prefix.replace('-', '_'))
    return router
