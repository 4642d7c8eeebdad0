"""Logging setup shared by the demo runner and the sandbox."""

import logging

from carbon_calculator.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger once; later calls only adjust the level."""
    resolved = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger().setLevel(resolved)

    # httpx logs every request at INFO; keep it quiet unless debugging
    if not settings.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)
