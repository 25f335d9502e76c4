"""
JSON file helpers shared by the stores.

Writes go to a temporary file in the target directory and are moved into
place with ``os.replace``, so readers never see a partial file.
"""

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any

from floorsync.errors import PersistenceError, ValidationError

_SAFE_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def safe_file_name(identifier: str, field: str = "id") -> str:
    """Check that an identifier can be used as a file name."""
    if not _SAFE_NAME.match(identifier):
        raise ValidationError(f"Identifier cannot be stored: {identifier!r}", field=field)
    return identifier


def read_json(path: Path) -> Any:
    """Read a JSON file, raising PersistenceError on unreadable content."""
    try:
        with open(path) as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise PersistenceError(f"Corrupt data file {path}: {e}") from e
    except OSError as e:
        raise PersistenceError(f"Failed to read {path}: {e}") from e


def write_json_atomic(path: Path, data: Any) -> None:
    """Write JSON to ``path`` atomically."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            json.dump(data, f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except OSError as e:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise PersistenceError(f"Failed to write {path}: {e}") from e
