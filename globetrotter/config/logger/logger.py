"""
Unified logging configuration for the GlobeTrotter service.

The configuration is read from a YAML file next to this module (default: logger.yaml)
and applied with `logging.config.dictConfig`. Every record carries two extra fields,
`service` and `request_id`, injected by `ServiceFilter`.

Settings (`globetrotter.config.config`, read from the environment or .env):
-------------------------------------------------------------------------
- LOGGING_CONFIG_FILE: Name of the YAML configuration file.
- LOG_LEVEL: Root log level override (e.g., DEBUG, INFO, WARNING).
- LOG_DIR: Directory for the file handler (default: ./logs).
- SERVICE_NAME: Service name written with every record.

Usage:
------
The entry point (`globetrotter/main.py`) calls `setup_logger()` once, before
anything logs. All other modules only do:

    import logging
    logger = logging.getLogger(__name__)
"""

import logging
import uuid
from pathlib import Path

from contextvars import ContextVar
from logging.config import dictConfig

import yaml

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from globetrotter.config.config import Settings, settings


request_id_ctx_var: ContextVar[str | None] = ContextVar('request_id', default=None)
formatter_str = '%(asctime)s %(levelname)s %(name)s %(message)s service=%(service)s request_id=%(request_id)s'


class ServiceFilter(logging.Filter):
    """Injects `service` and `request_id` into every log record."""

    def __init__(self, service_name: str | None = None):
        super().__init__()
        self.service_name = service_name or settings.service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service_name
        record.request_id = request_id_ctx_var.get() or '-'
        return True


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Assigns a unique ID to every incoming request.

    The ID is stored in `request_id_ctx_var` (picked up by `ServiceFilter`), on
    `request.state.request_id`, and echoed back in the `X-Request-ID` response header.
    """

    async def dispatch(self, request: Request, call_next):
        req_id = request.headers.get('X-Request-ID') or str(uuid.uuid4())
        token = request_id_ctx_var.set(req_id)
        request.state.request_id = req_id
        try:
            response = await call_next(request)
        finally:
            request_id_ctx_var.reset(token)
        response.headers['X-Request-ID'] = req_id
        return response


def get_request_id(default: str = '-') -> str:
    """Return the current request ID, or `default` outside of a request."""
    return request_id_ctx_var.get() or default


def setup_logger(app_settings: Settings | None = None):
    """
    Initializes the application logger from the YAML configuration file.
    Falls back to a console + file configuration when the file is missing.
    """
    app_settings = app_settings or settings
    config_path = Path(__file__).parent / app_settings.logging_config_file

    log_level = app_settings.log_level.upper()
    level = getattr(logging, log_level, logging.INFO)
    log_dir = Path(app_settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    if not config_path.is_file():
        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        for handler in (logging.StreamHandler(), logging.FileHandler(str(log_dir / 'app.log'))):
            handler.setLevel(level)
            handler.setFormatter(logging.Formatter(formatter_str))
            handler.addFilter(ServiceFilter())
            root_logger.addHandler(handler)
        return

    with open(config_path) as f:
        config = yaml.safe_load(f)

    if 'root' in config:
        config['root']['level'] = log_level

    # the file handler always writes inside LOG_DIR
    handlers = config.get('handlers', {})
    if 'file' in handlers:
        filename = handlers['file'].get('filename', 'app.log')
        handlers['file']['filename'] = str(log_dir / Path(filename).name)

    dictConfig(config)
