from __future__ import annotations

import logging

PACKAGE_LOGGER = "tabfig"
_FORMAT = "%(levelname)s %(name)s: %(message)s"


def enable_verbose(level: int = logging.INFO) -> logging.Logger:
    """Raise the package logger to ``level`` and attach one stream handler.

    Repeated calls reuse the handler installed by the first one.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    if not any(getattr(h, "_tabfig_verbose", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._tabfig_verbose = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
