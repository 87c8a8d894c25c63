from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from codereps.domain.constants import DEFAULT_DAYS_AHEAD, DEFAULT_MAX_RECORD_ATTEMPTS


def config_dir() -> Path:
    return Path.home() / ".config/codereps"


class AppConfig(BaseSettings):
    """
    Configuration model for codereps.
    Supports loading from:
    1. Environment variables (CODEREPS_*)
    2. Config file (~/.config/codereps/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="CODEREPS_",
        extra="ignore",
    )

    # Paths
    data_file: Path = Field(default_factory=lambda: config_dir() / "problems.yaml")

    # Queue
    default_days_ahead: int = Field(default=DEFAULT_DAYS_AHEAD, ge=0)

    # Solve recording
    max_record_attempts: int = Field(default=DEFAULT_MAX_RECORD_ATTEMPTS, ge=1)

    # Logging: 0 warnings, 1 info, 2 debug
    verbose: int = Field(default=0, ge=0)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # Init (CLI) beats env beats the TOML file
        toml_file = config_dir() / "config.toml"
        if toml_file.exists():
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("data_file", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path:
        return Path(v).expanduser()


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/codereps/config.toml (if exists)
    3. Environment variables (CODEREPS_*)
    4. cli_overrides (passed from Typer)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
