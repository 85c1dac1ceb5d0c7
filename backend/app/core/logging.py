# backend/app/core/logging.py
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging once for the process.

    Modules log through `logging.getLogger(__name__)`; this only sets the
    level and format. Secrets (passwords, answers, hashes, tokens) must never
    be passed to a logger.
    """
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("backend").setLevel(level)
