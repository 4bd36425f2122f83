"""Logging configuration helpers."""

import logging

# Loggers of client libraries that report every store request at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore", "hpack")


def configure_logging(level: int | str = logging.INFO) -> None:
    """Route ``props_assets`` logs to stderr and quiet the HTTP client logs.

    ``level`` accepts a numeric level or a name such as ``"debug"``, as read
    from the ``LOG_LEVEL`` setting. Repeated calls only adjust the level.
    """
    if isinstance(level, str):
        level = level.upper()
    logger = logging.getLogger("props_assets")
    logger.setLevel(level)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
