"""
Logging module
Plain text or structured JSON logging to stdout
"""
import logging
import sys

from pythonjsonlogger import jsonlogger

TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
JSON_FORMAT = '%(asctime)s %(name)s %(levelname)s %(message)s'


def setup_logging(level: str = "INFO", fmt: str = "text") -> logging.Handler:
    """Configure the root logger, replacing a handler installed by an earlier call"""
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    for handler in list(logger.handlers):
        if getattr(handler, "_influx_snippets", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler._influx_snippets = True

    if fmt == "json":
        formatter = jsonlogger.JsonFormatter(JSON_FORMAT)
    else:
        formatter = logging.Formatter(TEXT_FORMAT)

    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return handler
