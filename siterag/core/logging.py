"""Logging configuration."""

import logging
import sys

from siterag.core.config import settings


def setup_logging() -> None:
    """Configure application logging."""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    # Set third-party loggers to WARNING
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("neo4j").setLevel(logging.WARNING)


def describe_error(error: BaseException) -> str:
    """Render an error for user-visible output; internal detail only outside production."""
    if settings.is_production:
        return "Sorry, I'm having trouble finding that information. Please try again later."
    return f"{type(error).__name__}: {error}"
