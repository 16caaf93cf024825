"""CIBorium configuration management using Pydantic."""

from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from ciborium.constants import CONFIG_FILE, StopCommand
from ciborium.exceptions import ConfigurationError
from ciborium.option_splitter import tokenize, tokenize_names

# camelCase keys written by older versions, mapped to current field names
LEGACY_WRAPPER_KEYS = {
    "dockerImage": "docker_image",
    "includeEnvironment": "include_environment",
    "dockerOpts": "docker_opts",
}


class WrapperConfig(BaseModel):
    """Docker build wrapper settings.

    ``include_environment`` and ``docker_opts`` are stored as serialized
    lists and tokenized when used.
    """

    docker_image: str | None = None
    include_environment: str | None = None
    docker_opts: str | None = None

    def image_or(self, default: str) -> str:
        """Get the configured image, or ``default`` when none is set."""
        if self.docker_image is None or not self.docker_image.strip():
            return default
        return self.docker_image.strip()

    def environment_allowlist(self) -> list[str]:
        return tokenize_names(self.include_environment)

    def extra_options(self) -> list[str]:
        return tokenize(self.docker_opts)


class TeardownConfig(BaseModel):
    """Container cleanup settings."""

    stop_command: str = Field(default=StopCommand.KILL.value, pattern="^(kill|stop)$")

    def get_stop_command(self) -> StopCommand:
        return StopCommand(self.stop_command)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="info", pattern="^(debug|info|warn|error)$")
    directory: str | None = None
    max_log_size_mb: int = Field(default=10, ge=1, le=1000)


class PipelineConfig(BaseModel):
    """Steps run by ``ciborium run`` when none are given on the command line."""

    job_name: str | None = None
    steps: list[str] = Field(default_factory=list)


class CiboriumConfig(BaseModel):
    """Complete CIBorium configuration."""

    wrapper: WrapperConfig = Field(default_factory=WrapperConfig)
    teardown: TeardownConfig = Field(default_factory=TeardownConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> "CiboriumConfig":
        """Load configuration from YAML file.

        Args:
            config_path: Path to config file. Defaults to .ciborium/config.yaml

        Returns:
            CiboriumConfig instance

        Raises:
            ConfigurationError: If the file is not valid YAML or has invalid values
        """
        config_path = Path(CONFIG_FILE) if config_path is None else Path(config_path)

        if not config_path.exists():
            return cls()

        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ConfigurationError(f"Configuration in {config_path} must be a mapping")
            return cls.from_dict(data)
        except (yaml.YAMLError, PydanticValidationError, TypeError) as e:
            raise ConfigurationError(f"Invalid configuration in {config_path}", details={"error": str(e)}) from e

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CiboriumConfig":
        """Create configuration from dictionary, migrating legacy keys.

        Args:
            data: Configuration dictionary

        Returns:
            CiboriumConfig instance
        """
        return cls(**migrate(data))

    def save(self, config_path: str | Path | None = None) -> None:
        """Save configuration to YAML file.

        Args:
            config_path: Path to save config. Defaults to .ciborium/config.yaml
        """
        config_path = Path(CONFIG_FILE) if config_path is None else Path(config_path)

        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Configuration as dictionary
        """
        return self.model_dump()


def migrate(data: dict[str, Any]) -> dict[str, Any]:
    """Rewrite configuration saved by older versions into the current layout.

    Older files kept the wrapper settings at the top level under camelCase
    names; those move under ``wrapper``. Current keys win over legacy ones.
    """
    data = dict(data)
    raw_wrapper = data.get("wrapper")
    if raw_wrapper is not None and not isinstance(raw_wrapper, dict):
        raise ConfigurationError("'wrapper' must be a mapping", details={"wrapper": raw_wrapper})
    wrapper = dict(raw_wrapper or {})
    for source in (data, dict(wrapper)):
        for legacy, current in LEGACY_WRAPPER_KEYS.items():
            if legacy in source:
                value = source[legacy]
                data.pop(legacy, None)
                wrapper.pop(legacy, None)
                wrapper.setdefault(current, value)
    if wrapper or "wrapper" in data:
        data["wrapper"] = wrapper
    return data
