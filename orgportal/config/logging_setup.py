"""Process-wide logging setup."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once at startup.

    Module code only ever calls ``logging.getLogger(__name__)``; handlers and
    levels are decided here so uvicorn/gunicorn workers share one format.
    """
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # SQL echo is far too chatty for the app log
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
