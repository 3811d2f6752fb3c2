import contextvars

_current_request = contextvars.ContextVar("current_request", default=None)


def set_current_request(request):
    """Guarda a requisição corrente numa context var."""
    return _current_request.set(request)


def get_current_request():
    return _current_request.get()


def reset_request(token):
    _current_request.reset(token)


def current_actor() -> str | None:
    """Id do usuário autenticado da requisição corrente (auditoria)."""
    request = get_current_request()
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        return None
    return str(user.pk)
