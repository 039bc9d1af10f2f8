import logging
import sys
import json
import re
from typing import Any, Dict, Optional
from logging.handlers import QueueHandler, QueueListener
from queue import Queue
from metapay.config.admin_config import admin_config
from metapay.common.constants import request_id_ctx

ENV = getattr(admin_config, "ENV", "dev").lower()

SENSITIVE_PATTERNS = [
    r"secret", r"token", r"authorization", r"api_key", r"apikey",
    r"x-admin-secret", r"password",
]

# attributes every LogRecord carries, everything else came in through `extra`
_RECORD_ATTRS = frozenset((
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
    "created", "msecs", "relativeCreated", "thread", "threadName", "processName",
    "process", "taskName", "message",
))


def sanitize_message_text(msg: str) -> str:
    """Redact secrets and seller API keys inside a text message (best-effort)."""
    out = re.sub(r"metapay_sk_[0-9a-f]+", "metapay_sk_[REDACTED]", msg)
    for p in SENSITIVE_PATTERNS:
        out = re.sub(rf'("{p}"\s*:\s*")[^"]+(")', r'\1[REDACTED]\2', out, flags=re.IGNORECASE)
        out = re.sub(rf'({p}\s*[=:]\s*)[\w\-\./]+', r'\1[REDACTED]', out, flags=re.IGNORECASE)
    return out


def mask_value(val: Any) -> str:
    val = str(val)
    if len(val) > 12:
        return val[:6] + "..." + val[-4:]
    return val[:4] + "..."


class JSONFormatter(logging.Formatter):
    """Structured JSON formatter for staging and prod"""

    MASKED_FIELDS = ("api_key", "wallet", "wallet_address", "email")

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "env": ENV,
            "service": admin_config.SERVICE_NAME,
        }

        rid = request_id_ctx.get()
        if rid:
            log_data["request_id"] = rid

        extra_fields = {
            k: v for k, v in record.__dict__.items()
            if k not in _RECORD_ATTRS and not k.startswith("_")
        }
        for field in self.MASKED_FIELDS:
            if field in extra_fields and extra_fields[field] and ENV != "dev":
                extra_fields[field] = mask_value(extra_fields[field])
        log_data.update(extra_fields)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if ENV != "dev":
            log_data["message"] = sanitize_message_text(log_data.get("message", ""))

        return json.dumps(log_data, default=str)


class SecurityFilter(logging.Filter):
    """Redact sensitive info from message text outside dev"""

    def filter(self, record: logging.LogRecord) -> bool:
        if ENV != "dev":
            try:
                record.msg = sanitize_message_text(record.getMessage())
                record.args = ()
            except (TypeError, ValueError):
                pass
        return True


_queue_listener: Optional[QueueListener] = None


def setup_logging():
    """Install a non-blocking queue based root logger. Call once at app startup."""
    global _queue_listener

    if _queue_listener is not None:
        return logging.getLogger("metapay.app")

    log_level = logging.INFO if ENV in ("prod", "staging") else logging.DEBUG

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    q: Queue = Queue(-1)
    qh = QueueHandler(q)

    console_handler = logging.StreamHandler(sys.stdout)
    if ENV != "dev":
        console_handler.setFormatter(JSONFormatter())
        console_handler.addFilter(SecurityFilter())
    else:
        console_handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)8s] %(name)s:%(funcName)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))

    root.setLevel(log_level)
    root.addHandler(qh)

    _queue_listener = QueueListener(q, console_handler, respect_handler_level=True)
    _queue_listener.start()

    # silence noisy third-party loggers outside dev
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING if ENV != "dev" else logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return logging.getLogger("metapay.app")


def stop_logging():
    global _queue_listener
    if _queue_listener is not None:
        _queue_listener.stop()
        _queue_listener = None


class ContextLogger:
    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    def _with_ctx(self, kwargs: Dict[str, Any]) -> Dict[str, Any]:
        extra = dict(kwargs.pop("extra", None) or {})
        rid = request_id_ctx.get()
        if rid:
            extra.setdefault("request_id", rid)
        kwargs["extra"] = extra
        return kwargs

    def debug(self, msg: str, *args, **kwargs):
        self._logger.debug(msg, *args, **self._with_ctx(kwargs))

    def info(self, msg: str, *args, **kwargs):
        self._logger.info(msg, *args, **self._with_ctx(kwargs))

    def warning(self, msg: str, *args, **kwargs):
        self._logger.warning(msg, *args, **self._with_ctx(kwargs))

    def error(self, msg: str, *args, **kwargs):
        self._logger.error(msg, *args, **self._with_ctx(kwargs))

    def exception(self, msg: str, *args, **kwargs):
        self._logger.exception(msg, *args, **self._with_ctx(kwargs))


def get_logger(name: str = "metapay.app") -> ContextLogger:
    return ContextLogger(name)
