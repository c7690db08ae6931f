# pyright: reportExplicitAny=false, reportAny=false
"""Configuration models.

Sections are frozen pydantic models. Config.load merges every source
(defaults, user file, project file, environment, CLI) and validates the
result once.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError

from opensrc.exceptions import ConfigValidationError

from ._defaults import DEFAULT_CONFIG
from ._loader import deep_merge, parse_env_vars, read_toml_file


class LogLevel(StrEnum):
    """Log level threshold values, most verbose first."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class ConfigSourceName(StrEnum):
    """Configuration source names, highest precedence first."""

    CLI = "cli"
    ENV = "env"
    PROJECT = "project"
    USER = "user"
    DEFAULT = "default"


@dataclass(frozen=True, slots=True)
class ConfigSource:
    """A configuration source.

    Attributes:
        name: The source type identifier.
        path: Path to the config file, or None for CLI, ENV and DEFAULT.
        exists: Whether the source exists.
        values: Configuration values from this source.
    """

    name: ConfigSourceName
    path: Path | None
    exists: bool
    values: dict[str, Any]


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to the log file (empty uses the default location).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    file: str = ""


class FetchConfig(BaseModel):
    """Fetch configuration section.

    Attributes:
        concurrency: Maximum specifiers fetched in parallel.
        clone_depth: Shallow clone depth; 0 clones full history.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    concurrency: int = Field(default=4, ge=1, le=64)
    clone_depth: int = Field(default=1, ge=0)


class RegistriesConfig(BaseModel):
    """Registry endpoints.

    Attributes:
        npm: npm registry base URL.
        pypi: PyPI base URL.
        crates: crates.io base URL.
        timeout: HTTP timeout in seconds.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    npm: str = "https://registry.npmjs.org"
    pypi: str = "https://pypi.org"
    crates: str = "https://crates.io"
    timeout: float = Field(default=30.0, gt=0)


def _validation_error(e: ValidationError, source: str | None) -> ConfigValidationError:
    error = e.errors()[0]
    key = ".".join(str(part) for part in error["loc"])
    msg = f"Invalid configuration value for '{key}': {error['msg']}"
    return ConfigValidationError(
        msg,
        key=key,
        value=error.get("input"),
        expected=error["msg"],
        source=source,
    )


class Config(BaseModel):
    """Validated opensrc configuration.

    Use from_dict(), from_file() or load() rather than the constructor.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    registries: RegistriesConfig = Field(default_factory=RegistriesConfig)

    _sources: tuple[ConfigSource, ...] = PrivateAttr(default=())

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        *,
        sources: tuple[ConfigSource, ...] = (),
        source: str | None = None,
    ) -> Self:
        """Create configuration from a dictionary merged over the defaults.

        Args:
            data: Configuration values.
            sources: Sources that contributed to ``data``.
            source: Source label used in validation errors.

        Returns:
            Validated configuration.

        Raises:
            ConfigValidationError: If a value has the wrong type or range.
        """
        merged = deep_merge(DEFAULT_CONFIG, data)
        try:
            config = cls.model_validate(merged)
        except ValidationError as e:
            raise _validation_error(e, source) from e
        config._sources = sources
        return config

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Load configuration from a single TOML file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigLoadError: If the file cannot be parsed.
            ConfigValidationError: If validation fails.
        """
        data = read_toml_file(path)
        source = ConfigSource(
            name=ConfigSourceName.PROJECT,
            path=path,
            exists=True,
            values=data,
        )
        return cls.from_dict(data, sources=(source,), source=str(path))

    @classmethod
    def load(
        cls,
        *,
        project_root: Path,
        include_env: bool = True,
        cli_overrides: dict[str, Any] | None = None,
    ) -> Self:
        """Load merged configuration from all sources.

        Sources merge lowest to highest: defaults, user file, project file
        (``<root>/.opensrc.toml``), environment, CLI overrides.

        Args:
            project_root: Project whose ``.opensrc.toml`` is read.
            include_env: Include ``OPENSRC_<SECTION>__<KEY>`` variables.
            cli_overrides: Values from command-line flags.

        Returns:
            Merged, validated configuration.

        Raises:
            ConfigLoadError: If a config file cannot be parsed.
            ConfigValidationError: If the merged config fails validation.
        """
        from opensrc.config._discovery import discover_sources  # noqa: PLC0415

        merged: dict[str, Any] = {}
        loaded: list[ConfigSource] = []

        for source in reversed(
            discover_sources(
                project_root,
                include_env=include_env,
                cli_overrides=cli_overrides,
            )
        ):
            values = source.values
            if source.name is ConfigSourceName.ENV:
                values = parse_env_vars()
            elif source.path is not None and source.exists:
                values = read_toml_file(source.path)

            loaded.append(
                ConfigSource(
                    name=source.name,
                    path=source.path,
                    exists=source.exists,
                    values=values,
                )
            )
            if values:
                merged = deep_merge(merged, values)

        return cls.from_dict(merged, sources=tuple(reversed(loaded)))

    @property
    def sources(self) -> list[ConfigSource]:
        """Sources that contributed to this configuration, highest first."""
        return list(self._sources)
