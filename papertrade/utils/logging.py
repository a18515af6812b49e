"""Logging setup shared by the API server and the CLI."""

import logging

from papertrade.config import settings


def setup_logging(level: str | None = None):
    """Configure the root logger from settings.log_level."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s | %(levelname)-8s | %(name)s - %(message)s",
    )
    # APScheduler logs every job execution at INFO
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
