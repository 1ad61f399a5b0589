"""config.json loader: model overrides, access keys, server and logging options."""
import json
import logging
import os

logger = logging.getLogger("ddgproxy.config")

_EMPTY_CONFIG = {"models": {}, "access_keys": [], "server": {}, "logging": {}}


def _normalize_models(models):
    """Return a clean {external id: upstream id} mapping.

    Accepts either an object mapping ids to upstream ids or a list of
    ``{"id": ..., "model": ...}`` entries.
    """
    normalized = {}
    if isinstance(models, dict):
        items = models.items()
    elif isinstance(models, list):
        items = [
            (item.get("id"), item.get("model", item.get("id")))
            for item in models
            if isinstance(item, dict)
        ]
    else:
        return normalized
    for model_id, upstream_id in items:
        if not isinstance(model_id, str) or not model_id.strip():
            continue
        if not isinstance(upstream_id, str) or not upstream_id.strip():
            continue
        normalized[model_id.strip()] = upstream_id.strip()
    return normalized


def _normalize_access_keys(access_keys):
    if isinstance(access_keys, str):
        return [item.strip() for item in access_keys.split(",") if item.strip()]
    if isinstance(access_keys, dict):
        access_keys = list(access_keys.keys())
    if isinstance(access_keys, list):
        return [item.strip() for item in access_keys if isinstance(item, str) and item.strip()]
    return []


def _normalize_logging(logging_cfg):
    if not isinstance(logging_cfg, dict):
        logging_cfg = {}
    try:
        sample_rate = float(logging_cfg.get("sample_rate", 1.0))
    except (TypeError, ValueError):
        sample_rate = 1.0
    redact_headers = logging_cfg.get("redact_headers", ["authorization", "cookie"])
    if isinstance(redact_headers, str):
        redact_headers = [item.strip() for item in redact_headers.split(",") if item.strip()]
    if not isinstance(redact_headers, list):
        redact_headers = []
    return {
        "sample_rate": max(0.0, min(1.0, sample_rate)),
        "include_headers": bool(logging_cfg.get("include_headers", False)),
        "redact_headers": redact_headers,
    }


def validate_config(raw):
    """Check the raw config shape; return a list of warnings."""
    errors = []
    models = raw.get("models")
    if models is not None:
        if not isinstance(models, (dict, list)):
            errors.append("models must be an object or a list")
        elif not _normalize_models(models):
            errors.append("models is set but contains no valid entries")

    access_keys = raw.get("access_keys")
    if access_keys is not None and not isinstance(access_keys, (str, list, dict)):
        errors.append("access_keys must be a list or comma-separated string")

    server = raw.get("server", {})
    if isinstance(server, dict) and "port" in server:
        try:
            port = int(server.get("port"))
            if port <= 0 or port > 65535:
                errors.append("server.port must be between 1 and 65535")
        except (TypeError, ValueError):
            errors.append("server.port must be an integer")

    logging_cfg = raw.get("logging", {})
    if isinstance(logging_cfg, dict) and "sample_rate" in logging_cfg:
        try:
            rate = float(logging_cfg["sample_rate"])
            if not 0.0 <= rate <= 1.0:
                errors.append("logging.sample_rate must be between 0 and 1")
        except (TypeError, ValueError):
            errors.append("logging.sample_rate must be a number")
    return errors


def load_config(path):
    """Load config.json from ``path``; a missing file yields an empty config."""
    if not path or not os.path.exists(path):
        return dict(_EMPTY_CONFIG, errors=[])
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Could not read config %s: %s", path, exc)
        return dict(_EMPTY_CONFIG, errors=[f"config.json unreadable: {exc}"])

    if not isinstance(raw, dict):
        return dict(_EMPTY_CONFIG, errors=["config.json must contain an object"])

    config_errors = validate_config(raw)
    if config_errors:
        logger.warning("Config validation warnings: %s", "; ".join(config_errors))
    return {
        "models": _normalize_models(raw.get("models")),
        "access_keys": _normalize_access_keys(raw.get("access_keys")),
        "server": raw.get("server", {}) if isinstance(raw.get("server"), dict) else {},
        "logging": _normalize_logging(raw.get("logging")),
        "errors": config_errors,
    }


def get_logging_config(config):
    return _normalize_logging(config.get("logging"))


def get_server_port(config):
    """Return server.port from config, if set."""
    port = config.get("server", {}).get("port")
    try:
        return int(port)
    except (TypeError, ValueError):
        return None
