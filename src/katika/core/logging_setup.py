"""Process-wide logging configuration."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the root logger.

    Safe to call more than once: an existing handler installed by this
    function is reused and only the level is updated.

    Args:
        level: Log level name such as ``"INFO"`` or ``"DEBUG"``.  Unknown
            names fall back to ``INFO``.
    """
    root = logging.getLogger()
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    root.setLevel(resolved)

    for handler in root.handlers:
        if getattr(handler, "_katika", False):
            return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._katika = True  # type: ignore[attr-defined]
    root.addHandler(handler)
