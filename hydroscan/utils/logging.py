# hydroscan/utils/logging.py
import logging

from hydroscan.utils.settings import LOG_LEVEL

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_configured = False


def _configure():
    global _configured
    if _configured:
        return
    # no-op when the root logger already has handlers (uvicorn, celery, pytest)
    logging.basicConfig(format=_FORMAT)
    logging.getLogger("hydroscan").setLevel(LOG_LEVEL.upper())
    _configured = True


def get_logger(name: str) -> logging.Logger:
    _configure()
    return logging.getLogger(name)
