"""Base module for the backend layer: shared logger and log configuration."""

import logging
import sys

import structlog

# Libraries logging every HTTP request at DEBUG level
SDK_LOGGERS = ("openstack", "keystoneauth", "urllib3", "kubernetes")

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


def _configure_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


_configure_structlog()

logger = structlog.get_logger(__name__)


def configure_logger(log_level: str = "INFO", sdk_log_level: str = "WARNING") -> None:
    """Route structlog and stdlib records through one JSON handler on stdout.

    The manager modules log with ``logging.getLogger(__name__)``; their records
    are rendered like the structlog ``logger`` ones, including any context
    bound with ``bind_context``.

    Args:
        log_level: Level of the agent's own records
        sdk_log_level: Level of the openstacksdk, keystoneauth and kubernetes
            loggers; ignored when ``log_level`` is DEBUG
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    _configure_structlog()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=_SHARED_PROCESSORS,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    sdk_level = level if level == logging.DEBUG else getattr(
        logging, sdk_log_level.upper(), logging.WARNING
    )
    for name in SDK_LOGGERS:
        logging.getLogger(name).setLevel(sdk_level)


def bind_context(**values: str) -> None:
    """Attach values such as the command or host to every following record."""
    structlog.contextvars.bind_contextvars(**values)
