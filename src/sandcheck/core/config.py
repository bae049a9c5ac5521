"""Application state and configuration."""

from __future__ import annotations

from pathlib import Path

import platformdirs
from pydantic import ConfigDict, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from sandcheck.core.base import BaseConfig
from sandcheck.core.log import Logger
from sandcheck.core.yaml_settings import YamlWithIncludesSettingsSource

# ============================================================
# CHECK DEFAULTS
# ============================================================

# Pinned so a check gives the same verdict on every machine
DEFAULT_IMAGE = "rust:1.79.0"
DEFAULT_RUNTIME = "docker"
DEFAULT_MOUNT_PATH = "/project"
DEFAULT_COMMAND = ["cargo", "check"]

# ============================================================
# CONFIG MODELS (loaded from YAML/env/CLI)
# ============================================================

class CheckConfig(BaseConfig):
    """Isolated check execution configuration."""

    runtime: str = Field(
        default=DEFAULT_RUNTIME,
        description=(
            "Container runtime executable (docker, podman, or a path)"
        ),
    )
    image: str = Field(
        default=DEFAULT_IMAGE,
        description=(
            "Version-pinned toolchain image; avoid floating tags "
            "like 'latest'"
        ),
    )
    mount_path: str = Field(
        default=DEFAULT_MOUNT_PATH,
        description="In-container path where the project is bind-mounted",
    )
    workdir: str | None = Field(
        default=None,
        description=(
            "In-container working directory (defaults to mount_path)"
        ),
    )
    command: list[str] = Field(
        default_factory=lambda: list(DEFAULT_COMMAND),
        description="Check command run inside the container",
    )
    remove: bool = Field(
        default=True,
        description="Remove the container after the run (--rm)",
    )
    capture_dir: Path | None = Field(
        default=None,
        description=(
            "Directory for the temporary output capture file "
            "(system temp dir if unset)"
        ),
    )

    @property
    def container_workdir(self) -> str:
        return self.workdir or self.mount_path


class Config(BaseConfig):
    """Application configuration loaded from YAML/env/CLI."""

    logger: Logger = Field(
        default_factory=Logger,
        description="Logger configuration and runtime instance",
    )
    check: CheckConfig = Field(
        default_factory=CheckConfig,
        description="Isolated check settings",
    )
    log_level: str | None = Field(
        default=None,
        alias="log-level",
        description=(
            "Console log level override: 'trace', 'debug', 'info', "
            "'warn', 'error', 'fatal'"
        ),
    )
    log_root: Path = Field(
        default_factory=(
            lambda: Path(platformdirs.user_state_dir("sandcheck", appauthor=False))
        ),
        description="Root directory for log files",
    )

    model_config = ConfigDict(populate_by_name=True)


# ============================================================
# STATE
# ============================================================

class State(BaseSettings):
    """Loaded configuration for one invocation.

    Sources, highest priority first: init/CLI arguments, environment
    variables (SANDCHECK_CONFIG__CHECK__IMAGE=...), .env, YAML files
    (with include support), file secrets.
    """

    config: Config = Field(
        default_factory=Config,
        description="Application configuration (from YAML/env/CLI)",
    )
    include: list[str] | None = Field(
        default=None,
        description=(
            "Additional YAML files to include and merge. "
            "Files are processed during load and deep-merged."
        ),
    )

    model_config = SettingsConfigDict(
        yaml_file="sandcheck.yaml",
        env_file=".env",
        env_prefix="SANDCHECK_",
        env_nested_delimiter="__",
        cli_implicit_flags=True,
        # .env may hold unrelated secrets
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings source priority.

        Priority order (highest to lowest):
        1. init_settings (direct instantiation arguments)
        2. Environment variables
        3. .env file
        4. YAML files with include support
        5. File secrets

        Environment sits above YAML because the package defaults
        file sets every check key.
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlWithIncludesSettingsSource(settings_cls),
            file_secret_settings,
        )

    @model_validator(mode="after")
    def _setup_logger(self) -> "State":
        """Install the configured logger as the global singleton."""
        from sandcheck.core.log import use_logger

        config = self.config
        if config.log_level:
            config.logger.console.level = config.log_level
        use_logger(config.logger, config.log_root)
        return self


__all__ = ["State", "Config", "CheckConfig"]
