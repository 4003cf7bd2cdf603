"""Logging configuration."""

import logging
import logging.handlers
import sys
from typing import Optional

from sharevalue.config.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE_NAME = "share_value.log"


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure application logging.

    Logs go to stdout and, when settings.log_to_file is set, to a rotating
    file in the data directory. level overrides settings.log_level.
    """
    settings = get_settings()
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.log_to_file:
        handlers.append(
            logging.handlers.RotatingFileHandler(
                settings.get_data_dir() / LOG_FILE_NAME,
                maxBytes=5 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
        )

    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper()),
        format=LOG_FORMAT,
        handlers=handlers,
    )

    # Provider chatter and per-statement SQL stay out of the engine log
    for noisy in ("sqlalchemy.engine", "yfinance", "peewee", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
