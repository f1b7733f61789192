"""
Logging helpers for eventdrops.

eventdrops runs inside a chart renderer's redraw loop, so it stays quiet by
default: modules log through ``get_logger(__name__)`` and the package logger
carries only a NullHandler until an application opts in.

Who logs what
-------------
- Calendar, resolver, refiner and aggregator modules log at DEBUG only
  (chosen granularity, refinement steps, dropped-event counts).
- The pipeline facade logs each Diagnostic (e.g. a malformed domain) at
  WARNING before returning it to the caller.
- Nothing here touches the root logger or writes files.

Turning output on
-----------------
    ```python
    from eventdrops.utils.logging import configure_logging
    configure_logging()                 # level from EVENTDROPS_LOG_LEVEL, else INFO
    configure_logging("DEBUG", force=True)
    ```
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO, Optional, Union

DEFAULT_FMT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d:%(funcName)s: %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"

LOG_LEVEL_ENV = "EVENTDROPS_LOG_LEVEL"
ROOT_LOGGER_NAME = "eventdrops"


def level_from_env(default: int = logging.INFO) -> int:
    """Level named by EVENTDROPS_LOG_LEVEL (name or number), else ``default``."""
    return parse_level(os.environ.get(LOG_LEVEL_ENV), default)


def parse_level(level: Optional[Union[str, int]], default: int = logging.INFO) -> int:
    """Turn "debug", "WARNING", "10" or 10 into a logging level.

    Unknown names give ``default``.
    """
    if level is None:
        return default
    if isinstance(level, int):
        return level
    text = level.strip()
    if text.isdigit():
        return int(text)
    value = logging.getLevelName(text.upper())
    return value if isinstance(value, int) else default


def configure_logging(
    level: Optional[Union[str, int]] = None,
    *,
    fmt: Optional[str] = None,
    datefmt: Optional[str] = None,
    stream: Optional[IO[str]] = None,
    force: bool = False,
) -> logging.Handler:
    """
    Attach a stream handler to the 'eventdrops' logger.

    Parameters
    ----------
    level:
        Level name or number. None reads EVENTDROPS_LOG_LEVEL (INFO if unset
        or unknown).
    fmt, datefmt:
        Formatter settings; DEFAULT_FMT / DEFAULT_DATEFMT when None.
    stream:
        Output stream, stderr by default.
    force:
        Drop existing handlers first. Without it, an existing handler on the
        same stream is reused and only its level is updated.

    Returns
    -------
    The handler now writing eventdrops records.
    """
    resolved = level_from_env() if level is None else parse_level(level)
    out = stream if stream is not None else sys.stderr

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(resolved)

    if force:
        for h in logger.handlers[:]:
            h.close()
            logger.removeHandler(h)
    else:
        for h in logger.handlers:
            if isinstance(h, logging.StreamHandler) and h.stream is out:
                h.setLevel(resolved)
                return h

    handler = logging.StreamHandler(out)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt=fmt or DEFAULT_FMT, datefmt=datefmt or DEFAULT_DATEFMT))
    logger.addHandler(handler)
    return handler


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger for ``name``; the package logger 'eventdrops' when None."""
    return logging.getLogger(name or ROOT_LOGGER_NAME)
