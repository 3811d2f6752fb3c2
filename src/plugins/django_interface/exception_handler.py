import structlog
from pydantic import ValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from treatment_billing.core.domain.events.exceptions import (
    CascadeDeletionError,
    ClinicOpsError,
    InvalidInput,
    InvalidTransition,
    NotFound,
    PaymentExceedsRemaining,
    PersistenceFailure,
)

logger = structlog.get_logger(__name__)

# ordem importa: a primeira classe compatível vence
STATUS_BY_ERROR: tuple[tuple[type[ClinicOpsError], int], ...] = (
    (InvalidInput, status.HTTP_400_BAD_REQUEST),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (InvalidTransition, status.HTTP_409_CONFLICT),
    (PaymentExceedsRemaining, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (CascadeDeletionError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (PersistenceFailure, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def api_exception_handler(exc, context):
    """Traduz as falhas tipadas do domínio e erros de validação pydantic em HTTP."""
    if isinstance(exc, ValidationError):
        return Response(
            {"code": "invalid_input", "detail": exc.errors(include_url=False, include_context=False, include_input=False)},
            status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, ClinicOpsError):
        code = next(
            (http for kind, http in STATUS_BY_ERROR if isinstance(exc, kind)),
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
        log = logger.error if code >= 500 else logger.info
        log("api.domain_error", error_code=exc.code, status=code, error=str(exc))
        return Response(exc.to_dict(), status=code)

    return drf_exception_handler(exc, context)
