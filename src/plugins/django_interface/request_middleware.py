import uuid

import structlog

from treatment_billing.adapters.context.request_context import reset_request, set_current_request


class RequestContextMiddleware:
    """
    Guarda a requisição numa context var e vincula `request_id`, `path` e
    `user_id` aos logs estruturados enquanto ela durar.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        token = set_current_request(request)
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        user = getattr(request, "user", None)
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=request.path,
            user_id=str(user.pk) if user is not None and user.is_authenticated else None,
        )
        try:
            response = self.get_response(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id", "path", "user_id")
            reset_request(token)
        response["X-Request-ID"] = request_id
        return response
