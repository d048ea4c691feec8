"""Root logger setup for ``sync-skew-monitor`` runs.

Diagnostics go to stderr; stdout is left to the live status line and the run
summary.  An optional rotating file keeps a record of long acquisitions.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def configure_logging(
    level: Union[int, str] = "INFO",
    *,
    log_file: Optional[Union[str, Path]] = None,
) -> None:
    """Replace the root handlers with a stderr handler and, if given, a rotating file.

    ``level`` is a level number or name (case-insensitive); an unknown name
    raises ``ValueError``.
    """
    numeric = logging.getLevelName(level.upper()) if isinstance(level, str) else int(level)
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level {level!r}")

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(path, maxBytes=1_000_000, backupCount=3, encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT)
    for h in handlers:
        h.setFormatter(formatter)
        root.addHandler(h)
    root.setLevel(numeric)
