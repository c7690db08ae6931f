"""Layered configuration for opensrc.

Sources, lowest to highest precedence: built-in defaults, the user file
(``config.toml`` in the platform config dir), ``<root>/.opensrc.toml``,
``OPENSRC_<SECTION>__<KEY>`` environment variables, CLI flags.

Classes:
    Config: Validated configuration with logging, fetch and registries sections.
    LoggingConfig, FetchConfig, RegistriesConfig: Section models.

Functions:
    safe_load_config: Load for the CLI, falling back to defaults on error.
"""

from opensrc.config._defaults import DEFAULT_CONFIG
from opensrc.config._discovery import (
    PROJECT_CONFIG_NAME,
    discover_sources,
    get_project_config_path,
    get_user_config_path,
)
from opensrc.config._load import safe_load_config
from opensrc.config._loader import (
    deep_merge,
    parse_env_vars,
    parse_string_value,
    read_toml_file,
    set_nested_key,
)
from opensrc.config._models import (
    Config,
    ConfigSource,
    ConfigSourceName,
    FetchConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    RegistriesConfig,
)

__all__ = [
    "DEFAULT_CONFIG",
    "PROJECT_CONFIG_NAME",
    "Config",
    "ConfigSource",
    "ConfigSourceName",
    "FetchConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "RegistriesConfig",
    "deep_merge",
    "discover_sources",
    "get_project_config_path",
    "get_user_config_path",
    "parse_env_vars",
    "parse_string_value",
    "read_toml_file",
    "safe_load_config",
    "set_nested_key",
]
