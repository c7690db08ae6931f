"""Default configuration values.

DEFAULT_CONFIG is a plain dict so it can be fed straight into deep_merge,
which copies rather than mutates its inputs.
"""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
    "logging": {
        "level": "info",
        "format": "json",
        "file": "",
    },
    "fetch": {
        "concurrency": 4,
        "clone_depth": 1,
    },
    "registries": {
        "npm": "https://registry.npmjs.org",
        "pypi": "https://pypi.org",
        "crates": "https://crates.io",
        "timeout": 30.0,
    },
}
