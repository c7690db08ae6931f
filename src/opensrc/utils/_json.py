from typing import TYPE_CHECKING, cast

import orjson

if TYPE_CHECKING:
    from pathlib import Path


def load_json(json_str: str | bytes) -> dict[str, object] | list[object] | None:
    """Load and parse a JSON string.

    Args:
        json_str: The JSON text to parse.

    Returns:
        The parsed JSON data as a dictionary or list, or None if parsing fails.
    """
    try:
        data = orjson.loads(json_str)
    except orjson.JSONDecodeError:
        return None
    if not isinstance(data, dict | list):
        return None
    return cast("dict[str, object] | list[object]", data)


def load_json_file(file_path: "Path") -> dict[str, object] | list[object] | None:  # noqa: UP037
    """Load and parse a JSON file.

    Args:
        file_path: Path to the JSON file.

    Returns:
        The parsed JSON data, or None if the file is unreadable or not JSON.
    """
    try:
        content = file_path.read_bytes()
    except OSError:
        return None
    return load_json(content)


def dump_json(data: object) -> bytes:
    """Serialize data as 2-space indented JSON with a trailing newline."""
    return orjson.dumps(data, option=orjson.OPT_INDENT_2 | orjson.OPT_APPEND_NEWLINE)
