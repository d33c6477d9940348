"""
Logging setup.

Modules create their own logger with logging.getLogger(__name__).
configure_logging() is called once at application start and
installs a single handler on the root logger.
"""

import logging

from spending_ledger.config import get_settings

_CONFIGURED = False


def configure_logging(level: str | None = None) -> None:
    """Install the root handler once; later calls are no-ops."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root = logging.getLogger()
    root.setLevel(level or get_settings().LOG_LEVEL)
    root.addHandler(handler)
    _CONFIGURED = True
