from __future__ import annotations

import json
import logging
from logging.handlers import RotatingFileHandler
import os

LOGGER_NAME = "vtimes-mcp"

SENSITIVE_ARG_KEYS = {
    "password",
    "pass",
    "token",
    "api_key",
    "apikey",
    "secret",
    "authorization",
}


def setup_logging(
    level_name: str = "INFO", debug: bool = False, log_dir: str | None = "logs", name: str = LOGGER_NAME
) -> logging.Logger:
    """Configure the shared gateway logger.

    Handlers go to stderr and, when ``log_dir`` is set, a rotating file.
    stdout is never used: the stdio surface owns it for protocol frames.
    """

    logger = logging.getLogger(name)
    if getattr(logger, "_vtimes_configured", False):
        return logger

    level = logging.DEBUG if debug else getattr(logging, str(level_name).upper(), logging.INFO)
    logger.setLevel(level)

    fmt = logging.Formatter("%(asctime)s %(levelname)s %(message)s")

    sh = logging.StreamHandler()
    sh.setLevel(level)
    sh.setFormatter(fmt)
    logger.addHandler(sh)

    logger.propagate = False

    if log_dir:
        path = os.path.join(log_dir, "mcp_server.log")
        try:
            os.makedirs(log_dir, exist_ok=True)
            fh = RotatingFileHandler(path, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        except OSError as e:
            # Hosts may launch the server from a read-only cwd; stderr logging still works.
            logger.warning(safe_json({"event": "log_file_unavailable", "path": path, "error": repr(e)}))
        else:
            fh.setLevel(level)
            fh.setFormatter(fmt)
            logger.addHandler(fh)

    logger._vtimes_configured = True
    return logger


def get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def safe_json(obj: object) -> str:
    try:
        return json.dumps(obj, ensure_ascii=False, sort_keys=True, default=str)
    except Exception:
        return json.dumps({"_error": "json-encode-failed"})


def has_sensitive_keys(args: dict | None) -> bool:
    if not isinstance(args, dict):
        return False
    return any(str(k).lower() in SENSITIVE_ARG_KEYS for k in args.keys())
