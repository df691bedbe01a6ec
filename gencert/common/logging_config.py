# gencert/common/logging_config.py
import logging
import sys

LOGGER = logging.getLogger("gencert")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Attach one stderr handler to the package logger (idempotent)."""
    LOGGER.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not LOGGER.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        LOGGER.addHandler(handler)
    return LOGGER
