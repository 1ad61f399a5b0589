"""Structured logging helpers."""
import json
import logging
import os
import random
import sys
import time
from logging.handlers import RotatingFileHandler

logger = logging.getLogger("ddgproxy")


def _build_rotating_handler(log_dir: str, filename: str) -> RotatingFileHandler:
    os.makedirs(log_dir, exist_ok=True)
    max_bytes = max(1, int(float(os.getenv("LOG_FILE_MAX_MB", "10")) * 1024 * 1024))
    backup_count = max(1, int(os.getenv("LOG_FILE_BACKUPS", "5")))
    handler = RotatingFileHandler(
        os.path.join(log_dir, filename),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def setup_logging(level: str, log_dir: str | None = None, to_file: bool = False) -> None:
    """Configure root logging: stdout always, a rotating file when enabled."""
    numeric = getattr(logging, level.upper(), logging.INFO)
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_dir and to_file:
        try:
            handlers.append(_build_rotating_handler(log_dir, "ddgproxy.log"))
        except OSError as exc:
            print(f"[ddgproxy] file logging disabled: {exc}", file=sys.stderr)
    logging.basicConfig(level=numeric, handlers=handlers, force=True)


def log_event(level: int, message: str, **fields) -> None:
    """Emit one JSON log line."""
    payload = {"message": message, "ts": int(time.time())}
    payload.update(fields)
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))


def redact_headers(headers, redact_list):
    """Return a headers dict with sensitive values masked."""
    redact_set = {item.lower() for item in redact_list}
    return {key: "***" if key.lower() in redact_set else value for key, value in headers.items()}


def should_log_request(status_code: int, sample_rate: float) -> bool:
    """Sample access logs; errors are always logged."""
    if status_code >= 400:
        return True
    return random.random() <= sample_rate
