"""
JSON File Storage Implementation

DESIGN DECISION: A single JSON file is the storage backend because:
1. Two users and a few dozen tasks don't need a database
2. The file can be read and fixed by hand
3. Backups are a file copy

TRADEOFFS:
- Every request reads the whole file and every mutation rewrites it
- No transactions or locking (last writer wins)
- Fine for the intended single-writer usage, nothing more

The document layout is `{"poe": [Task...], "poisson": [Task...]}`,
written with 2-space indentation.
"""

import json
from pathlib import Path
from typing import Optional, Union

import structlog
from pydantic import ValidationError

from sigeg.config import get_settings
from sigeg.models.task import TaskCollection
from sigeg.services.storage.document import DocumentTaskStorage
from sigeg.services.storage.interface import CorruptDataError


logger = structlog.get_logger(__name__)


class JsonFileTaskStorage(DocumentTaskStorage):
    """
    Task storage backed by one JSON file on disk.

    The file is read fresh on every call; nothing is cached between calls.
    """

    def __init__(
        self,
        data_file: Optional[Union[str, Path]] = None,
        indent: Optional[int] = None,
    ):
        settings = get_settings().storage
        self._path = Path(data_file) if data_file is not None else settings.data_file
        self._indent = indent if indent is not None else settings.json_indent

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> TaskCollection:
        """
        Read the data file.

        A missing file is an empty collection (first run). A file that
        exists but can't be parsed is an error: treating it as empty
        would let the next write destroy its contents.
        """
        if not self._path.exists():
            logger.warning("data_file_missing", path=str(self._path))
            return TaskCollection()

        try:
            raw = self._path.read_text(encoding="utf-8")
            return TaskCollection.model_validate_json(raw)
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            logger.error("data_file_read_failed", path=str(self._path), error=str(e))
            raise CorruptDataError(f"Failed to read data file {self._path}: {e}") from e

    def save(self, collection: TaskCollection) -> bool:
        """Rewrite the whole data file."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            payload = json.dumps(
                collection.to_wire(),
                indent=self._indent,
                ensure_ascii=False,
            )
            self._path.write_text(payload, encoding="utf-8")
            return True
        except OSError as e:
            logger.error("data_file_write_failed", path=str(self._path), error=str(e))
            return False
