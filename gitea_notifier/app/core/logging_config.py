"""
Logging for the notifier process.

``setup_logging`` installs the notifier's handlers on the root logger and
hands uvicorn's own loggers over to them, so server start‑up errors,
request tracebacks and access lines end up in the same stream and in
``LOG_FILE`` with the same format as application messages.  ``run.py``
starts uvicorn with ``log_config=None`` so that uvicorn does not install
its handlers again afterwards.
"""

import logging
from pathlib import Path
from typing import List, Optional


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

# Marks handlers installed here so repeated calls replace rather than stack them.
_OWNED = "_gitea_notifier_handler"


def _build_handlers(logfile: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(Path(logfile).resolve(), encoding="utf-8"))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _OWNED, True)
    return handlers


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger and route uvicorn's loggers through it.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``).  Unknown names fall back
        to ``INFO``.
    logfile : Optional[str]
        File that receives a copy of every record.  If omitted, records go
        to the console only.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in [h for h in root.handlers if getattr(h, _OWNED, False)]:
        root.removeHandler(handler)
        handler.close()
    for handler in _build_handlers(logfile):
        root.addHandler(handler)

    for name in UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True
