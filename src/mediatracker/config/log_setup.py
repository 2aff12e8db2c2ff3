"""
Logging configuration.

All application loggers live under the ``mediatracker`` namespace and
inherit the handler installed here. Records carry the current request id
(``-`` outside a request).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from mediatracker.api.middleware.request_id import RequestIdFilter

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s"


def configure_logging(level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Install the application log handler.

    Safe to call more than once; earlier handlers installed here are
    replaced rather than duplicated.

    Parameters
    ----------
    level : str
        Level name for the ``mediatracker`` logger.
    log_file : Path | None, optional
        Also write records to this file.

    Returns
    -------
    logging.Logger
        The configured ``mediatracker`` logger.
    """
    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    app_logger = logging.getLogger("mediatracker")
    for handler in list(app_logger.handlers):
        if getattr(handler, "_mediatracker_handler", False):
            app_logger.removeHandler(handler)
            handler.close()

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(RequestIdFilter())
        handler._mediatracker_handler = True  # type: ignore[attr-defined]
        app_logger.addHandler(handler)

    app_logger.setLevel(level.upper())
    return app_logger
