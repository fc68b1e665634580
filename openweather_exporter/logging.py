import logging
import sys
from typing import Optional

import structlog

# uvicorn installs no handlers when started with log_config=None
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _service_info(app: str, version: Optional[str]):
    def processor(logger, method_name, event_dict):
        event_dict.setdefault("app", app)
        if version:
            event_dict.setdefault("version", version)
        return event_dict

    return processor


def init_logging(
    log_level: str = "INFO",
    app: str = "openweather-exporter",
    version: Optional[str] = None,
) -> structlog.BoundLogger:
    """Send structlog events and stdlib records (uvicorn, requests) through one renderer.

    JSON lines on stdout, or console output when the level is DEBUG. Every
    line carries ``app`` and ``version``.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    renderer = structlog.dev.ConsoleRenderer() if level == logging.DEBUG else structlog.processors.JSONRenderer()

    shared = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        _service_info(app, version),
    ]

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared + [structlog.processors.format_exc_info],
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
    for name in UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = []
        uvicorn_logger.propagate = True

    structlog.configure(
        processors=shared + [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger()
