from __future__ import annotations

import json
import logging
import logging.config
import os

_STANDARD_LOGRECORD_ATTRS = {
    "name",
    "msg",
    "message",
    "asctime",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
}
_CONTEXT_ATTRS = {"worker_id"}


class _WorkerIdFilter(logging.Filter):
    """Default `worker_id` to "-" for records logged outside a worker."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "worker_id", None) in (None, ""):
            record.worker_id = "-"
        return True


class _JsonExtraFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = _extract_extras(record)
        if not extras:
            return base
        extras_json = json.dumps(extras, indent=2, default=str, sort_keys=True)
        return f"{base}\n{extras_json}"


def _extract_extras(record: logging.LogRecord) -> dict[str, object]:
    extras: dict[str, object] = {}
    for key, value in record.__dict__.items():
        if key in _STANDARD_LOGRECORD_ATTRS or key in _CONTEXT_ATTRS:
            continue
        extras[key] = value
    return extras


def _install_worker_filter() -> None:
    root = logging.getLogger()
    for handler in root.handlers:
        if any(isinstance(f, _WorkerIdFilter) for f in handler.filters):
            continue
        handler.addFilter(_WorkerIdFilter())


def configure_logging(*, log_level: str = "INFO") -> None:
    """Configure root logging with a consistent format.

    Records carry `worker_id` ("-" outside batch workers) so interleaved
    batch output can be told apart.
    """
    console_level_name = str(log_level).upper()
    default_console_fmt = "%(asctime)s %(levelname)s [worker %(worker_id)s] %(name)s %(message)s"
    console_fmt = os.getenv("VFM_LOG_FORMAT", default_console_fmt)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "()": "vfm.logging_setup._JsonExtraFormatter",
                    "format": console_fmt,
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": console_level_name,
                    "formatter": "default",
                    "stream": "ext://sys.stderr",
                }
            },
            "root": {"level": "DEBUG", "handlers": ["console"]},
        }
    )

    _install_worker_filter()
    logging.captureWarnings(True)

    # Reduce noisy third-party request logs by default.
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
