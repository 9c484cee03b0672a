"""
JSON file storage adapter for the back office.
Simple file-based storage for single-instance deployments and local work.
Not suitable for multi-instance deployments (no cross-process locking).
"""
import json
import logging
from typing import List, Dict, Any, Optional
from pathlib import Path

from core.errors import StorageError

logger = logging.getLogger(__name__)


class JsonStore:
    """
    JSON file-based document store.
    Stores each collection in its own JSON file under the data directory,
    as an object mapping key -> document.
    Uses atomic file operations for basic consistency.
    """

    def __init__(self, data_dir: str = "data"):
        """
        Initialize the JSON store.

        Args:
            data_dir: Directory to store JSON files
        """
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, collection: str) -> Path:
        if not collection or "/" in collection or "\\" in collection or collection.startswith("."):
            raise StorageError(f"Invalid collection name: {collection!r}")
        return self.data_dir / f"{collection}.json"

    def _read_file(self, filepath: Path) -> Dict[str, Dict[str, Any]]:
        """Read and parse a collection file."""
        if not filepath.exists():
            return {}
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt collection file {filepath.name}: {e}", cause=e)
        except OSError as e:
            raise StorageError(f"Failed to read {filepath.name}: {e}", cause=e)
        if not isinstance(data, dict):
            raise StorageError(f"Corrupt collection file {filepath.name}: expected an object")
        return data

    def _write_file(self, filepath: Path, data: Dict[str, Dict[str, Any]]) -> None:
        """Write data to a JSON file atomically."""
        tmp_file = filepath.with_suffix(".tmp")
        try:
            # Write to temporary file first
            with open(tmp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False, default=str)

            # Atomic rename
            tmp_file.replace(filepath)
        except OSError as e:
            raise StorageError(f"Failed to write {filepath.name}: {e}", cause=e)

    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        """Fetch a document by key."""
        return self._read_file(self._path(collection)).get(key)

    def set(self, collection: str, key: str, document: Dict[str, Any]) -> None:
        """Create or overwrite a document."""
        path = self._path(collection)
        data = self._read_file(path)
        # Round-trip through JSON so stored values never alias caller objects
        data[key] = json.loads(json.dumps(document, default=str))
        self._write_file(path, data)

    def delete(self, collection: str, key: str) -> None:
        """Remove a document if present."""
        path = self._path(collection)
        data = self._read_file(path)
        if key in data:
            del data[key]
            self._write_file(path, data)

    def list_keys(self, collection: str) -> List[str]:
        """List all keys in a collection."""
        return list(self._read_file(self._path(collection)).keys())
