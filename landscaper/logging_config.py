from __future__ import annotations

import logging
import os

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# PyGithub and urllib3 log every request at DEBUG.
_NOISY_LOGGERS = ("github", "urllib3")


def configure_logging(level: str | int | None = None, *, force: bool = False) -> None:
    resolved = level or os.environ.get("LANDSCAPER_LOG_LEVEL") or "INFO"
    if isinstance(resolved, str):
        resolved = resolved.strip().upper()
    logging.basicConfig(level=resolved, format=_FORMAT, force=force)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def ensure_logging_configured() -> None:
    """Configure logging once if nothing else (e.g. the CLI) has done so."""
    if not logging.getLogger().handlers:
        configure_logging()
