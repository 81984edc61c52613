
import os
import sys
import json
import datetime as dt
import logging
from contextlib import ExitStack
from logging.handlers import TimedRotatingFileHandler
from typing import Optional, TextIO

STDIO_PATH = "-"

# ---------- File helpers ----------

def load_file(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()

def _stdio(stream: TextIO, encoding: str) -> TextIO:
    # Replaced streams (pytest capture, StringIO) have no reconfigure().
    reconfigure = getattr(stream, "reconfigure", None)
    if reconfigure is not None and getattr(stream, "encoding", None) != encoding:
        reconfigure(encoding=encoding)
    return stream

def open_input_feed(path: str, stack: ExitStack, encoding: str = "utf-8") -> TextIO:
    """Open an input feed for reading; ``-`` means stdin (left open, re-encoded)."""
    if path == STDIO_PATH:
        return _stdio(sys.stdin, encoding)
    return stack.enter_context(open(path, "r", encoding=encoding, newline=""))

def open_output_feed(path: str, stack: ExitStack, encoding: str = "utf-8") -> TextIO:
    """Open an output feed for writing; ``-`` means stdout (left open, re-encoded).

    Parent directories are created as needed.
    """
    if path == STDIO_PATH:
        return _stdio(sys.stdout, encoding)
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)
    return stack.enter_context(open(path, "w", encoding=encoding, newline="\n"))

# ---------- Logging ----------

_LOGGER_INITIALIZED = False

class JsonFormatter(logging.Formatter):
    def format(self, record):
        payload = {
            "ts": dt.datetime.fromtimestamp(record.created, dt.timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)

def _build_logger():
    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    level = os.getenv("LOG_LEVEL", "INFO").upper()
    # File logging only when a directory is configured
    log_dir = os.getenv("LOG_DIR")
    json_mode = os.getenv("LOG_JSON", "false").lower() == "true"

    logger = logging.getLogger("mailpipe")
    logger.setLevel(getattr(logging, level, logging.INFO))

    if json_mode:
        fmt = JsonFormatter()
    else:
        fmt = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")

    # stderr keeps stdout free for a "-" sink
    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(logger.level)
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        fh = TimedRotatingFileHandler(os.path.join(log_dir, "mailpipe.log"), when="D", backupCount=7, encoding="utf-8")
        fh.setLevel(logger.level)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    _LOGGER_INITIALIZED = True

def set_log_level(level: str) -> None:
    """Override the level picked up from ``LOG_LEVEL``."""
    _build_logger()
    value = getattr(logging, level.upper(), None)
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    logger = logging.getLogger("mailpipe")
    logger.setLevel(value)
    for handler in logger.handlers:
        handler.setLevel(value)

def get_logger(name: Optional[str] = None) -> logging.Logger:
    _build_logger()
    return logging.getLogger(name if name else __name__)
