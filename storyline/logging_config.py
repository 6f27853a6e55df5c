"""
Logging setup for the Storyline service.

Call setup_logging() once at application startup (create_app() does it).
Every source module then gets its own logger via:

    import logging
    logger = logging.getLogger(__name__)

Level mapping:
  DEBUG   – skipped batch entries, memory appends to unknown NPCs
  INFO    – ingestion counts, sync results, precheck outcomes
  WARNING – ignored payload values (e.g. non-integral moneyChange)
  ERROR   – aborted prechecks, store failures
"""

import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """Configure root logger and quiet noisy third-party loggers."""
    fmt = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=fmt,
        stream=sys.stdout,
        force=True,
    )

    for name in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(name).setLevel(logging.WARNING)
