from __future__ import annotations

import logging
from pathlib import Path
from typing import List

LOG_FILE_NAME = "otto.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _open_log_file(log_path: str) -> logging.FileHandler:
    """Open ``log_path``, or ./otto.log when its directory is unusable."""
    try:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(log_path)
    except OSError:
        return logging.FileHandler(str(Path.cwd() / LOG_FILE_NAME))


def _otto_handlers(root: logging.Logger) -> List[logging.Handler]:
    return [h for h in root.handlers if getattr(h, "_otto", False)]


def configure_logging(log_path: str, level: int = logging.INFO) -> str:
    """Send build logs to ``log_path`` and stderr.

    Only the first call installs handlers; later calls return the log file
    already in use. Returns the path actually written to.
    """

    root = logging.getLogger()
    root.setLevel(level)

    for h in _otto_handlers(root):
        if isinstance(h, logging.FileHandler):
            return h.baseFilename

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")
    file_handler = _open_log_file(log_path)
    for h in (file_handler, logging.StreamHandler()):
        h.setFormatter(fmt)
        setattr(h, "_otto", True)
        root.addHandler(h)

    chosen = file_handler.baseFilename
    logging.getLogger(__name__).info("Logging to %s", chosen)
    return chosen
