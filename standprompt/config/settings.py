"""Application settings loaded from environment variables via pydantic-settings.

Two sources feed these fields, highest priority first:

  1. Environment variables, e.g. ``MAX_PROMPT_LENGTH=4000``
  2. A ``.env`` file in the working directory (local development)

Field names map to upper-cased variable names automatically.  Defaults
apply when neither source sets a field; ``config/config.yaml`` supplies
the static baseline that :func:`~standprompt.config.loader.load_config`
merges these values into.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """standprompt settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Prompt budget ===
    max_prompt_length: int = 4500  # Target handed to the compressor
    generation_prompt_limit: int = 5000  # Hard limit of the downstream image API

    # === Visual context (Tier 2) ===
    visual_context_timeout: float = 30.0  # Seconds before the collaborator is abandoned

    # === Compression cache ===
    cache_enabled: bool = True
    cache_max_size: int = 256
    cache_ttl: int = 300  # Seconds

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"
