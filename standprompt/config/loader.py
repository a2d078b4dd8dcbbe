"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers, later layers winning:

  1. ``config/config.yaml``  static defaults checked into the repo
  2. ``.env`` file           local developer overrides
  3. Environment variables   set at deploy time

Only settings that were explicitly provided by layers 2 or 3 are merged
over the YAML values, so a default on :class:`Settings` never masks a
value written in the YAML file.
"""

from pathlib import Path

import yaml

from standprompt.config.settings import Settings
from standprompt.utils.errors import ConfigurationError

# Settings field -> (section, key) in the resolved config dict.
_FIELD_PATHS: dict[str, tuple[str, str]] = {
    "max_prompt_length": ("pipeline", "max_prompt_length"),
    "generation_prompt_limit": ("pipeline", "generation_prompt_limit"),
    "visual_context_timeout": ("visual_context", "timeout"),
    "cache_enabled": ("cache", "enabled"),
    "cache_max_size": ("cache", "max_size"),
    "cache_ttl": ("cache", "ttl"),
    "app_env": ("app", "env"),
    "log_level": ("logging", "level"),
}


def defaults_from_settings(settings: Settings) -> dict:
    """Return the full config dict built from *settings* alone."""
    resolved: dict = {}
    for field, (section, key) in _FIELD_PATHS.items():
        resolved.setdefault(section, {})[key] = getattr(settings, field)
    return resolved


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.  A missing file is
            treated as empty.
        settings: Settings instance to overlay.  Built from the
            environment when omitted.

    Returns:
        Fully resolved configuration dictionary with the sections
        ``pipeline``, ``visual_context``, ``cache``, ``app`` and ``logging``.

    Raises:
        ConfigurationError: If the file is not valid YAML or its top level
            is not a mapping.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            try:
                yaml_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"Cannot parse {config_path}: {exc}") from exc
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(f"{config_path} must contain a mapping at the top level")
    else:
        yaml_config = {}

    settings = settings or Settings()

    resolved = defaults_from_settings(Settings.model_construct())
    _deep_merge(resolved, yaml_config)

    env_overrides: dict = {}
    for field in settings.model_fields_set:
        if field in _FIELD_PATHS:
            section, key = _FIELD_PATHS[field]
            env_overrides.setdefault(section, {})[key] = getattr(settings, field)
    _deep_merge(resolved, env_overrides)
    return resolved


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
