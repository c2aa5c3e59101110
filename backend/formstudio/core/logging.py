"""
Structured Logging Module
Request-scoped logging for the API plus domain loggers for the editor,
persistence, theme and submission layers. Production emits one JSON
object per line; development emits a short readable line.
"""
import inspect
import json
import logging
import time
import uuid
from contextvars import ContextVar
from functools import wraps
from typing import Any, Dict, Optional

from formstudio.core.config import settings

request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
request_start_var: ContextVar[Optional[float]] = ContextVar('request_start', default=None)


def get_request_id() -> Optional[str]:
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def generate_request_id() -> str:
    return uuid.uuid4().hex[:8]


def configure_logging(level: Optional[str] = None) -> None:
    """Attach a plain stream handler to the ``formstudio`` logger tree once."""
    root = logging.getLogger('formstudio')
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s'))
        root.addHandler(handler)
    root.setLevel(level or ('DEBUG' if settings.DEBUG else 'INFO'))


class StructuredLogger:
    """
    Logger that renders a message plus keyword context.

    ``bind`` returns a child that repeats fixed context (a form id, a theme
    id) on every line it writes.
    """

    def __init__(self, name: str, context: Optional[Dict[str, Any]] = None):
        self.name = name
        self.logger = logging.getLogger(name)
        self.context = dict(context or {})

    @property
    def json_output(self) -> bool:
        return settings.APP_ENV == 'production'

    def bind(self, **context) -> 'StructuredLogger':
        return StructuredLogger(self.name, {**self.context, **context})

    def _record(self, level: str, message: str, extra: Dict[str, Any], error: Optional[Exception]) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            'timestamp': time.strftime('%Y-%m-%dT%H:%M:%S%z'),
            'level': level,
            'logger': self.name,
            'message': message,
            'env': settings.APP_ENV,
        }
        request_id = get_request_id()
        if request_id:
            record['request_id'] = request_id
        started = request_start_var.get()
        if started:
            record['elapsed_ms'] = round((time.time() - started) * 1000, 2)
        context = {**self.context, **extra}
        if context:
            record['context'] = context
        if error is not None:
            record['error'] = {'type': type(error).__name__, 'message': str(error)}
        return record

    def _render(self, record: Dict[str, Any]) -> str:
        if self.json_output:
            return json.dumps(record, default=str)

        line = f"[{record.get('request_id', '-')}] {record['message']}"
        if 'context' in record:
            pairs = ' '.join(f'{k}={v}' for k, v in record['context'].items())
            line += f' | {pairs}'
        if 'error' in record:
            line += f" | error={record['error']['type']}: {record['error']['message']}"
        return line

    def _log(self, level: int, message: str, error: Optional[Exception] = None, **extra):
        if not self.logger.isEnabledFor(level):
            return
        record = self._record(logging.getLevelName(level), message, extra, error)
        self.logger.log(level, self._render(record))

    def debug(self, message: str, **extra):
        self._log(logging.DEBUG, message, **extra)

    def info(self, message: str, **extra):
        self._log(logging.INFO, message, **extra)

    def warning(self, message: str, **extra):
        self._log(logging.WARNING, message, **extra)

    def error(self, message: str, error: Optional[Exception] = None, **extra):
        self._log(logging.ERROR, message, error=error, **extra)


def get_logger(name: str = 'formstudio') -> StructuredLogger:
    return StructuredLogger(name)


# Domain loggers
api_logger = get_logger('formstudio.api')
editor_logger = get_logger('formstudio.editor')
persistence_logger = get_logger('formstudio.persistence')
theme_logger = get_logger('formstudio.themes')
submission_logger = get_logger('formstudio.submissions')


def log_operation(operation: str, logger: Optional[StructuredLogger] = None):
    """
    Time an async operation: debug on entry, info with the duration on
    success, error with the exception on failure (which is re-raised).

        @log_operation("forms.create", persistence_logger)
        async def create(self, form): ...
    """
    log = logger or api_logger

    def decorator(func):
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"log_operation expects a coroutine function, got {func!r}")

        @wraps(func)
        async def wrapper(*args, **kwargs):
            started = time.perf_counter()
            log.debug(f"{operation} started")
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                log.error(f"{operation} failed", error=e, duration_ms=_since(started))
                raise
            log.info(f"{operation} completed", duration_ms=_since(started))
            return result

        return wrapper

    return decorator


def _since(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
