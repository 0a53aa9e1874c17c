from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

_INITIALIZED = False


def configure_logging(level: Optional[str] = None, *, log_dir: Optional[Path] = None) -> None:
    """Configure console logging, plus a rotating file under ``LOG_DIR`` when set."""

    global _INITIALIZED
    if _INITIALIZED:
        return

    resolved_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    directory = log_dir or (Path(os.environ["LOG_DIR"]) if os.getenv("LOG_DIR") else None)

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if directory is not None:
        directory.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(str(directory / "scheduling_gateway.log"), maxBytes=1_000_000, backupCount=5)
        )

    root = logging.getLogger()
    root.setLevel(getattr(logging, resolved_level, logging.INFO))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    _INITIALIZED = True
    logging.getLogger(__name__).debug("Logging configured at %s", resolved_level)


__all__ = ["configure_logging"]
