"""Atomic JSON file replacement shared by the JSON-file stores.

The document is written to a temp file in the target's directory and
moved over the target with ``os.replace``. Readers see either the old
file or the new one, never a half-written file.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from pob.domain.exceptions import PersistenceError


def write_json_atomic(file_path: Path, data: Any) -> None:
    fd, tmp_name = tempfile.mkstemp(
        dir=file_path.parent, prefix=file_path.name, suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(json.dumps(data, indent=2) + "\n")
        os.replace(tmp_name, file_path)
    except OSError as exc:
        Path(tmp_name).unlink(missing_ok=True)
        raise PersistenceError(f"Could not write {file_path.name}: {exc}") from exc


def ensure_json_file(file_path: Path, empty: Any) -> None:
    """Create *file_path* holding *empty* unless it already exists."""
    if not file_path.exists():
        file_path.parent.mkdir(parents=True, exist_ok=True)
        write_json_atomic(file_path, empty)
