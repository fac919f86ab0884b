"""Logging configuration helpers."""

import logging

# SDK loggers that log every request at INFO.
_QUIET_LOGGERS = ("stripe", "httpx", "hpack", "aiosmtplib")


def configure_logging(level: str = "INFO") -> None:
    """Configure storefront logging with a single stream handler.

    Checkout and cart sync events log under ``refuel_store``; payment and
    database SDK chatter is raised to WARNING so card flows stay readable.
    """
    logger = logging.getLogger("refuel_store")
    logger.setLevel(level.upper())
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
