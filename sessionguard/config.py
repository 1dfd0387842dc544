"""
Configuration management for SessionGuard.

Handles persistent configuration including:
- CMS base URL and action trigger
- Session check timing
- Identity flags (username, MFA requirement, registered security keys)

Config is stored in config.json next to the executable/project root.
Environment variables (SESSIONGUARD_*) always win over the file.
"""

import json
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from sessionguard.constants import CHECK_INTERVAL, MIN_SAFE_SESSION_TIME, MIN_PASSWORD_LENGTH
from sessionguard.paths import get_config_path

ENV_PREFIX = "SESSIONGUARD_"


@dataclass
class Settings:
    """Resolved runtime settings."""
    base_url: str = "http://localhost:8080"
    action_trigger: str = "actions"
    check_interval: int = CHECK_INTERVAL
    min_safe_session_time: int = MIN_SAFE_SESSION_TIME
    min_password_length: int = MIN_PASSWORD_LENGTH
    request_timeout: float = 10.0
    username: Optional[str] = None
    require_mfa: bool = False
    has_security_keys: bool = False
    logout_redirect: str = "/"
    log_level: str = "INFO"


def load_config() -> dict:
    """Load configuration from config.json."""
    config_path = get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError):
            return {}
    return {}


def _coerce(value: Any, default: Any) -> Any:
    """Convert a raw config/env value to the type of the field default."""
    if isinstance(default, bool):
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    return value


def get_settings(overrides: Optional[Dict[str, Any]] = None) -> Settings:
    """
    Resolve settings.

    Priority:
    1. Explicit overrides
    2. Environment variables SESSIONGUARD_<FIELD>
    3. Stored in config.json
    4. Dataclass defaults
    """
    config = load_config()
    overrides = overrides or {}
    values: Dict[str, Any] = {}

    for field in fields(Settings):
        default = field.default
        env_value = os.environ.get(ENV_PREFIX + field.name.upper())

        if field.name in overrides:
            raw = overrides[field.name]
        elif env_value is not None:
            raw = env_value
        elif field.name in config:
            raw = config[field.name]
        else:
            continue

        if raw is None or default is None:
            values[field.name] = raw
        else:
            try:
                values[field.name] = _coerce(raw, default)
            except (TypeError, ValueError):
                raise ValueError(f"Invalid value for {field.name}: {raw!r}")

    settings = Settings(**values)
    if settings.check_interval <= 0:
        raise ValueError("check_interval must be positive")
    if settings.min_safe_session_time <= 0:
        raise ValueError("min_safe_session_time must be positive")
    return settings
