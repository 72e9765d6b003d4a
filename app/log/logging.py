"""
Loguru logger configuration.

Every module imports the shared ``logger`` from here and passes structured
context as keyword arguments, e.g.::

    logger.info("Load test completed", event_type="load_test_completed", url=url)

Keyword arguments end up in ``record["extra"]`` and are rendered by the JSON
sink or appended to the human readable line in development.
"""

import logging
import sys
from logging.handlers import SysLogHandler

from loguru import logger

from app.core.config import settings

DEV_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level> | {extra}"
)


class InterceptHandler(logging.Handler):
    """Route standard library logging records (uvicorn, httpx) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(config: dict | None = None) -> None:
    """
    Configure loguru sinks from the service logging configuration.

    Args:
        config: Logging configuration, defaults to ``settings.logging_config``.
    """
    config = config or settings.logging_config

    logger.remove()
    logger.configure(extra={"service": config["app_name"]})

    if config["json_logs"]:
        logger.add(sys.stdout, level=config["log_level"], serialize=True, enqueue=False)
    else:
        logger.add(sys.stderr, level=config["log_level"], format=DEV_FORMAT, colorize=True)

    if config.get("syslog_host") and config.get("syslog_port"):
        logger.add(
            SysLogHandler(address=(config["syslog_host"], config["syslog_port"])),
            level=config["log_level"],
            serialize=True,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


setup_logging()

__all__ = ["logger", "setup_logging"]
