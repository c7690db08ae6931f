"""Shared utilities for opensrc.

Functions:
    create_cli_logger: Standalone structlog file logger.
    get_cli_log_file: Default CLI log file location.
    load_json, load_json_file, dump_json: orjson helpers.
"""

from opensrc.utils._json import dump_json, load_json, load_json_file
from opensrc.utils._logging import LogFormatType, create_cli_logger
from opensrc.utils._paths import get_cli_log_file, get_user_log_dir

__all__ = [
    "LogFormatType",
    "create_cli_logger",
    "dump_json",
    "get_cli_log_file",
    "get_user_log_dir",
    "load_json",
    "load_json_file",
]
