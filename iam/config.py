import os
from functools import lru_cache

import yaml

from .lib import paths

DEFAULT_CONFIG = {
    "alias_prefix": "agent",
    "alias_style": "numeric",  # "numeric" -> agent1, "letters" -> agentA
    "inbox_dir": ".inbox",  # empty string keeps threads in memory only
    "log_dir": ".logs",
    "log_file": "iam.log",
    "logging_level": "INFO",
    "announce_enabled": True,
    "broadcast_enabled": True,
    "subagent_tools": ["announce", "broadcast"],
}

ALIAS_STYLES = ("numeric", "letters")
ENV_PREFIX = "IAM_"


def _coerce(value: str, original):
    if isinstance(original, bool):
        return value.strip().lower() in ("true", "1", "t", "y", "yes")
    if isinstance(original, int):
        try:
            return int(value)
        except ValueError:
            return original
    if isinstance(original, list):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


def _apply_env(cfg: dict) -> None:
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        config_key = key[len(ENV_PREFIX) :].lower()
        if config_key in cfg:
            cfg[config_key] = _coerce(value, cfg[config_key])


def _validate_config(cfg: dict) -> None:
    """Validate config structure. Fail fast on invalid types."""
    if not isinstance(cfg, dict):
        raise ValueError(f"Config must be a dict, got {type(cfg).__name__}")

    for key, default in DEFAULT_CONFIG.items():
        if key in cfg and not isinstance(cfg[key], type(default)):
            raise ValueError(
                f"Config '{key}' must be {type(default).__name__}, got {type(cfg[key]).__name__}"
            )

    if cfg.get("alias_style", "numeric") not in ALIAS_STYLES:
        raise ValueError(f"Config 'alias_style' must be one of {ALIAS_STYLES}")


def _clear_cache():
    load_config.cache_clear()


@lru_cache(maxsize=1)
def load_config() -> dict:
    """Load config: defaults, then IAM_* environment overrides, then .iam/config.yaml."""
    cfg = {key: (list(value) if isinstance(value, list) else value) for key, value in DEFAULT_CONFIG.items()}
    _apply_env(cfg)

    path = paths.config_file()
    if path.exists():
        with open(path) as f:
            user_cfg = yaml.safe_load(f) or {}
        _validate_config(user_cfg)
        cfg.update(user_cfg)

    _validate_config(cfg)
    return cfg
