# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Centralised logging configuration.

Levels, handlers and formats live in etc/logging.conf.  The file contains a
``%(log_file)s`` placeholder which is replaced with the absolute path of
log/serdo.log before the text is handed to ``logging.config.fileConfig``.

Never pass secret values (passwords, API keys, reveal keys) to the logger;
log field *names* instead.

    from core.logger import logger
"""

import configparser
import logging
import logging.config
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_LOG_DIR      = _PROJECT_ROOT / "log"
_LOG_FILE     = _LOG_DIR / "serdo.log"
_LOGGING_CONF = _PROJECT_ROOT / "etc" / "logging.conf"


def _configure() -> None:
    _LOG_DIR.mkdir(exist_ok=True)

    raw = _LOGGING_CONF.read_text(encoding="utf-8")
    raw = raw.replace("%(log_file)s", str(_LOG_FILE))

    # RawConfigParser: the format strings contain %(asctime)s etc. which the
    # interpolating parser would choke on.
    parser = configparser.RawConfigParser()
    parser.read_string(raw)
    logging.config.fileConfig(parser, disable_existing_loggers=False)


_configure()

logger = logging.getLogger("serdo")
