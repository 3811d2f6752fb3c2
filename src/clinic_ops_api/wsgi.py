import os

from config.structlog_config import configure_logging

configure_logging()

# 1) Ajuste padrão de settings
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

# 2) Cria a aplicação WSGI (o DI é montado em ClinicOpsConfig.ready)
from django.core.wsgi import get_wsgi_application  # noqa: E402

application = get_wsgi_application()
