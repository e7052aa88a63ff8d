"""JSON document helpers with atomic writes.

Every persisted artifact (markets file, consumed ledgers, pending queues) is a
single JSON document rewritten in full on each mutation. Writes go through a
tempfile -> rename in the same directory so a crash mid-write leaves the previous
document intact.

Single-writer precondition: these helpers provide no locking. Two processes
doing read-modify-write on the same path can lose updates.
"""

import json
import logging
import shutil
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class CorruptDocumentError(ValueError):
    """A persisted JSON document exists but cannot be parsed."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Corrupt JSON document {path}: {reason}")
        self.path = path


def read_json(path: Path, default: Any) -> Any:
    """Load a JSON document, returning ``default`` if the file does not exist.

    An empty file is treated like a missing one. Invalid JSON raises
    CorruptDocumentError rather than silently resetting state.
    """
    if not path.exists():
        return default

    raw = path.read_text(encoding="utf-8")
    if not raw.strip():
        logger.warning(f"Empty JSON document: {path}")
        return default

    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise CorruptDocumentError(path, str(e)) from e


def write_json_atomic(path: Path, data: Any) -> None:
    """Atomically replace ``path`` with the JSON serialization of ``data``."""
    path.parent.mkdir(parents=True, exist_ok=True)

    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            delete=False,
            suffix=".json",
            encoding="utf-8",
        ) as temp_file:
            json.dump(data, temp_file, indent=2, ensure_ascii=False)
            temp_file.write("\n")
            temp_path = Path(temp_file.name)

        shutil.move(str(temp_path), str(path))
        logger.debug(f"Wrote {path}")

    except Exception as e:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        logger.error(f"Failed to write {path}: {e}")
        raise
