from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

import structlog
from django.db import DatabaseError

from treatment_billing.core.domain.events.exceptions import PersistenceFailure

F = TypeVar("F", bound=Callable[..., Any])

logger = structlog.get_logger(__name__)


def translate_db_errors(fn: F) -> F:
    """Converte `DatabaseError` do ORM em `PersistenceFailure` (causa encadeada)."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except DatabaseError as exc:
            logger.error("repository.db_error", operation=fn.__qualname__, error=str(exc))
            raise PersistenceFailure(f"{fn.__qualname__}: {exc}") from exc
    return wrapper  # type: ignore[return-value]
