"""Configuration management for environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

from src.utils.exceptions import ConfigurationError

FLAGGED_POLICIES = ("warn", "skip", "annotate")


class Config:
    """Migration configuration loaded from environment variables.

    Keyword overrides (typically CLI options) take precedence over the
    environment; an override of None falls through to the environment.
    """

    def __init__(self, **overrides: str | None) -> None:
        """Load configuration from .env file, environment and overrides.

        Args:
            **overrides: Values keyed by lower-case setting name (e.g. database_url)

        Raises:
            ConfigurationError: If a required value is missing or a value is invalid
        """
        # Load .env file if it exists
        env_path = Path(".env")
        if env_path.exists():
            load_dotenv(env_path)

        self._overrides = {key: value for key, value in overrides.items() if value is not None}

        # Required configuration
        self.database_url = self._get_required("DATABASE_URL")

        # Optional configuration with defaults
        self.output_path = Path(self._get("OUTPUT_PATH", "output"))
        self.table_prefix = self._get("TABLE_PREFIX", "tcc_")
        self.template_name = self._get("TEMPLATE_NAME", "default_page.toml.j2")
        self.template_dir = self._get("TEMPLATE_DIR", None)
        self.output_extension = self._get("OUTPUT_EXTENSION", "md").lstrip(".")
        self.flagged_policy = self._get("FLAGGED_POLICY", "annotate").lower()
        self.log_level = self._get("LOG_LEVEL", "INFO")

        if self.flagged_policy not in FLAGGED_POLICIES:
            raise ConfigurationError(
                f"FLAGGED_POLICY must be one of {', '.join(FLAGGED_POLICIES)}, "
                f"got '{self.flagged_policy}'"
            )
        if not self.output_extension:
            raise ConfigurationError("OUTPUT_EXTENSION cannot be empty")

    def _get(self, key: str, default: str | None) -> str | None:
        override = self._overrides.get(key.lower())
        if override is not None:
            return str(override)
        return os.getenv(key, default)

    def _get_required(self, key: str) -> str:
        """Get required setting or raise error.

        Args:
            key: Environment variable name

        Returns:
            Setting value

        Raises:
            ConfigurationError: If variable is not set
        """
        value = self._get(key, None)
        if not value:
            raise ConfigurationError(f"{key} environment variable is not set")
        return value
