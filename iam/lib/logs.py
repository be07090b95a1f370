"""File logging for the iam logger tree."""

import logging
import sys

from . import paths

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"

_handler: logging.Handler | None = None


def setup_logging(cfg: dict) -> logging.Logger:
    """Attach one truncating file handler to the ``iam`` logger.

    The log is cleared on every process start, like the in-memory state it describes.
    Safe to call repeatedly; only the first call installs a handler.
    """
    global _handler

    logger = logging.getLogger("iam")
    logger.setLevel(cfg.get("logging_level", "INFO").upper())
    if _handler is not None:
        return logger

    target = paths.log_file(cfg["log_dir"], cfg["log_file"])
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(target, mode="w", encoding="utf-8")
    except OSError as e:
        print(f"iam: file logging disabled ({e})", file=sys.stderr)
        return logger

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    _handler = handler
    return logger


def _reset_for_testing() -> None:
    global _handler
    if _handler is not None:
        logging.getLogger("iam").removeHandler(_handler)
        _handler.close()
        _handler = None
