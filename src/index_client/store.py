"""Durable local storage for the bookmark search index."""
import contextlib
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from index_client.models import INDEX_FORMAT_VERSION, IndexState

logger = logging.getLogger(__name__)


class IndexStore:
    """
    JSON file holding the local index entries and the last applied cursor.

    Entries and cursor are always written together in a single atomic file
    replacement, so a crash never leaves a cursor that does not match the
    entries.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> IndexState | None:
        """
        Load the stored index.

        Returns None when there is no usable index: the file is missing,
        unreadable, not valid JSON, or was written by another format version.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Could not read local index %s: %s", self.path, e)
            return None

        try:
            state = IndexState.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "Ignoring corrupt local index %s (%d errors)", self.path, e.error_count(),
            )
            return None

        if state.version != INDEX_FORMAT_VERSION:
            logger.warning(
                "Ignoring local index %s with format version %s (expected %s)",
                self.path,
                state.version,
                INDEX_FORMAT_VERSION,
            )
            return None
        return state

    def save(self, state: IndexState) -> None:
        """Atomically replace the stored index with `state`."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = state.model_dump_json(by_alias=True)

        fd, tmp_path = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_path)
            raise

    def clear(self) -> None:
        """Delete the stored index, if any."""
        self.path.unlink(missing_ok=True)
