"""Run the example flow against a database URL (default: in-memory SQLite)."""

import sys

from atomic.core.config import settings
from atomic.core.logging import (
    configure_sqlalchemy_logging,
    get_logger,
    setup_logging,
)
from atomic.example import run_example

setup_logging(default_level=settings.LOG_LEVEL)
configure_sqlalchemy_logging(echo=settings.SQL_ECHO)
logger = get_logger(__name__)


def main() -> int:
    database_url = sys.argv[1] if len(sys.argv) > 1 else "sqlite://"
    ids = run_example(database_url)
    logger.info(f"Example finished, foos stored: {ids}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
