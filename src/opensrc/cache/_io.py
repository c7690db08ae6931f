"""Index file reading and atomic writing."""

from __future__ import annotations

import tempfile
from pathlib import Path

from opensrc.exceptions import IndexWriteError
from opensrc.utils import dump_json, load_json_file

from ._models import SourcesIndex


def read_index(path: Path) -> SourcesIndex:
    """Read ``sources.json``.

    A missing, unreadable or malformed file yields an empty index.

    Args:
        path: Path to the index file.

    Returns:
        The parsed index.
    """
    return SourcesIndex.from_dict(load_json_file(path))


def write_index(path: Path, index: SourcesIndex) -> None:
    """Write ``sources.json`` atomically.

    Writes to a temporary file in the same directory, then renames it over
    the target, so readers see either the old or the new index.

    Args:
        path: Destination file path.
        index: Index to serialize.

    Raises:
        IndexWriteError: If the file cannot be written.
    """
    temp_path: Path | None = None
    try:
        _ = path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            temp_path = Path(f.name)
            _ = f.write(dump_json(index.to_dict()))

        # Path.replace() is atomic on both POSIX and Windows
        _ = temp_path.replace(path)

    except OSError as e:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        msg = f"Failed to write index: {e}"
        raise IndexWriteError(msg, path=path, cause=e) from e
