"""
Logging setup for the CoPallet API.

``setup_logging`` installs the handlers on the root logger once per
process: a console handler, plus a file handler when ``LOG_FILE`` is
set.  Every module logs through ``logging.getLogger(__name__)``.
Polling of ``/health`` is kept out of the uvicorn access log.
"""

import logging
from pathlib import Path
from typing import List, Optional


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class EndpointFilter(logging.Filter):
    """Drop uvicorn access log records for the given paths."""

    def __init__(self, paths: tuple = ("/health",)) -> None:
        super().__init__()
        self.paths = paths

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        return not any(f'"GET {path} ' in message for path in self.paths)


def _handlers(logfile: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        log_path = Path(logfile).resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
    return handlers


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger.

    Parameters
    ----------
    level : str
        Level name such as ``"DEBUG"`` or ``"info"``.  Unknown names
        fall back to ``INFO``.
    logfile : Optional[str]
        Also write to this file; its directory is created if needed.
    """
    access_logger = logging.getLogger("uvicorn.access")
    if not any(isinstance(f, EndpointFilter) for f in access_logger.filters):
        access_logger.addFilter(EndpointFilter())

    root = logging.getLogger()
    if root.handlers:
        # Already configured by uvicorn, pytest or an earlier create_app().
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in _handlers(logfile):
        handler.setFormatter(formatter)
        root.addHandler(handler)
