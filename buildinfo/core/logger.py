import logging
import sys

from buildinfo.core.config import settings

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _setup_root_logger(level: str | None = None) -> logging.Logger:
    """Configure the root logger with a single stream handler.

    Calling this function more than once only updates the level; no duplicate
    handlers are attached.

    Parameters
    ----------
    level : str, optional
        Log level name, by default ``settings.log_level``.

    Returns
    -------
    logging.Logger
        The configured root logger.
    """
    root = logging.getLogger()
    root.setLevel((level or settings.log_level).upper())

    if not any(getattr(h, "_buildinfo", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handler._buildinfo = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    return root


def _setup_custom_logger(name: str) -> logging.Logger:
    """Return a named logger that propagates to the root logger."""
    return logging.getLogger(name)
