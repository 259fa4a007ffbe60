# creditvote_node/config.py
import copy
import logging
import os
from typing import Any, Dict, List

import yaml

CONFIG_FILENAME = "creditvote_config.yaml"

# -------- Defaults --------
_DEFAULT: Dict[str, Any] = {
    "logging": {"level": "INFO"},
    "persistence": {
        "enabled": False,
        "data_dir": "data",
        "filename": "creditvote_state.json",
        "keep_backups": 2,
    },
    "server": {"host": "127.0.0.1", "port": 8000},
    "cors": {"origins": ["http://localhost:5173", "http://127.0.0.1:5173"]},
}


def _as_bool(val: str) -> bool:
    return str(val).strip().lower() in ("1", "true", "yes", "on")


# -------- ENV overrides --------
_ENV_MAP = {
    ("logging", "level"): ("CREDITVOTE_LOG_LEVEL", str),
    ("persistence", "enabled"): ("CREDITVOTE_PERSIST", _as_bool),
    ("persistence", "data_dir"): ("CREDITVOTE_DATA_DIR", str),
    ("server", "host"): ("CREDITVOTE_HOST", str),
    ("server", "port"): ("CREDITVOTE_PORT", int),
}

log = logging.getLogger(__name__)


def _deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in (overlay or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _apply_env_overrides(cfg: Dict[str, Any]) -> Dict[str, Any]:
    for (section, key), (env_name, cast) in _ENV_MAP.items():
        val = os.getenv(env_name)
        if val is None:
            continue
        try:
            casted = cast(val)
        except ValueError:
            log.warning("ignoring %s=%r: not a valid %s", env_name, val, cast.__name__)
            continue
        cfg.setdefault(section, {})
        cfg[section][key] = casted
    return cfg


def load_config(repo_root: str) -> Dict[str, Any]:
    """
    Loads repo_root/creditvote_config.yaml over the defaults, then applies
    CREDITVOTE_* environment overrides.
    A missing or unparsable file leaves the defaults in place.
    """
    path = os.path.join(repo_root, CONFIG_FILENAME)
    cfg = copy.deepcopy(_DEFAULT)

    if os.path.exists(path):
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            log.warning("could not load %s, using defaults: %s", path, e)
            data = {}
        if isinstance(data, dict):
            cfg = _deep_merge(cfg, data)

    cfg = _apply_env_overrides(cfg)

    origins = cfg.get("cors", {}).get("origins")
    if isinstance(origins, str):
        cfg["cors"]["origins"] = [origins]

    return cfg


def configure_logging(cfg: Dict[str, Any]) -> None:
    level = str(cfg.get("logging", {}).get("level", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


# -------- Small helpers used by the app --------
def get_bind_host(cfg: Dict[str, Any]) -> str:
    return str(cfg.get("server", {}).get("host", "127.0.0.1"))


def get_bind_port(cfg: Dict[str, Any]) -> int:
    return int(cfg.get("server", {}).get("port", 8000))


def get_cors_origins(cfg: Dict[str, Any]) -> List[str]:
    return list(cfg.get("cors", {}).get("origins", []))


def persistence_enabled(cfg: Dict[str, Any]) -> bool:
    return bool(cfg.get("persistence", {}).get("enabled", False))


def get_persistence_settings(cfg: Dict[str, Any]) -> Dict[str, Any]:
    p = cfg.get("persistence", {})
    return {
        "data_dir": str(p.get("data_dir", "data")),
        "filename": str(p.get("filename", "creditvote_state.json")),
        "keep_backups": int(p.get("keep_backups", 2)),
    }
