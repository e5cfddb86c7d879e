import logging
import sys
from pythonjsonlogger import jsonlogger

from core.config import settings

SERVICE_NAME = "aurum-art-graph"
LOG_FORMAT = '%(asctime)s %(name)s %(levelname)s %(message)s'

def get_logger(name: str):
    """
    Returns a named logger writing one JSON object per line to stdout.
    Every record carries the service name; the level comes from LOG_LEVEL.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    # Uvicorn's root handlers would print each record a second time.
    logger.propagate = False

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(jsonlogger.JsonFormatter(
        LOG_FORMAT,
        rename_fields={"levelname": "level", "name": "logger"},
        static_fields={"service": SERVICE_NAME},
    ))
    logger.addHandler(handler)
    return logger
