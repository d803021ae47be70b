# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Centralised logging configuration.

Levels, handlers, rotation and format live in  etc/logging.conf.  The file
uses ``%(log_file)s`` as a placeholder for the rotating file handler; it is
resolved here to  $HIINEN_LOG_DIR/app.log  (default: <project>/log/app.log).

Import the ready-made logger anywhere:
    from core.logger import logger

Request bodies, passwords, tokens and prompt payloads must never be passed
to this logger – log identifiers and outcomes only.
"""

import configparser
import logging
import logging.config
import os
from pathlib import Path

# project root: backend/core/logger.py  →  ../../  →  hiinen/
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_LOGGING_CONF = _PROJECT_ROOT / "etc" / "logging.conf"

LOGGER_NAME = "hiinen"


def _log_dir() -> Path:
    return Path(os.environ.get("HIINEN_LOG_DIR") or _PROJECT_ROOT / "log")


def configure_logging() -> None:
    """Load etc/logging.conf, patching in the absolute log-file path."""
    log_dir = _log_dir()
    # The handler opens the file immediately, so the directory must exist first
    log_dir.mkdir(parents=True, exist_ok=True)

    raw = _LOGGING_CONF.read_text(encoding="utf-8")
    raw = raw.replace("%(log_file)s", str(log_dir / "app.log"))

    # RawConfigParser: the format strings contain %(asctime)s etc. which a
    # plain ConfigParser would try to interpolate.
    parser = configparser.RawConfigParser()
    parser.read_string(raw)

    logging.config.fileConfig(parser, disable_existing_loggers=False)


configure_logging()

logger = logging.getLogger(LOGGER_NAME)
