from functools import wraps

from treatment_billing.adapters.observability.metrics import HTTP_REQUESTS


def track_http(view_name):
    """Conta a requisição por view/método/status (exceções contam como "error")."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(self, request, *args, **kwargs):
            status = "error"
            try:
                resp = fn(self, request, *args, **kwargs)
                status = str(resp.status_code)
                return resp
            finally:
                HTTP_REQUESTS.labels(view=view_name, method=request.method, status=status).inc()
        return wrapper
    return decorator
