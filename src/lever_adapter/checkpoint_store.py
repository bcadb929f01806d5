"""
CheckpointStore module for persisting the last fully processed parent key
"""

import os
import logging
from pathlib import Path
from typing import Optional


logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when the checkpoint record cannot be read or written"""
    pass


class CheckpointStore:
    """
    Durable resume point for list-driven synchronisation

    The record is one plain-text file per entity type holding exactly the last
    parent key whose pagination completed. Within a run the store also acts as
    a latch over the key stream: keys up to and including the recorded key are
    reported as not reached, every key after it as reached.
    """

    def __init__(self, entity_type: str, directory: Path):
        self.entity_type = entity_type
        self.file_path = Path(directory) / f"{entity_type}_last_key"
        self._last_key: Optional[str] = None
        self._reached = False

    @property
    def last_key(self) -> str:
        """Last completed key, read from disk on first access"""
        if self._last_key is None:
            self._last_key = self._read_record()
        return self._last_key

    @property
    def has_reached(self) -> bool:
        return self._reached

    def reached(self, key: str) -> bool:
        """
        Report whether the key stream has passed the recorded key

        Args:
            key: Next parent key from the key source

        Returns:
            True if the key should be processed, False if it was already completed
        """
        if self._reached:
            return True

        last_key = self.last_key
        if last_key == "":
            logger.info(f"No checkpoint for {self.entity_type}, starting from the first key")
            self._reached = True
            return True

        if key == last_key:
            logger.info(f"Reached checkpoint {last_key}, resuming with the next key")
            self._reached = True

        return False

    def persist(self, key: str) -> None:
        """
        Replace the durable record with the given key

        The record is written to a temporary file and moved into place so it is
        never left partially written.

        Raises:
            PersistenceError: If the record cannot be written
        """
        temp_path = self.file_path.with_name(f"{self.file_path.name}.tmp")
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, 'w', encoding='utf-8') as f:
                f.write(key)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.file_path)
        except OSError as e:
            raise PersistenceError(f"Unable to write checkpoint {self.file_path}: {e}") from e

        self._last_key = key
        logger.info(f"Checkpointing {key}")

    def ensure_exists(self) -> None:
        """
        Create an empty record when none exists yet

        Raises:
            PersistenceError: If the record cannot be created
        """
        if self.file_path.exists():
            return

        logger.info(f"Creating new checkpoint file {self.file_path}")
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            self.file_path.touch()
        except OSError as e:
            raise PersistenceError(f"Unable to create checkpoint {self.file_path}: {e}") from e

    def clear(self) -> None:
        """
        Remove the durable record so the next run starts from the first key

        Raises:
            PersistenceError: If the record exists but cannot be removed
        """
        try:
            self.file_path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Unable to remove checkpoint {self.file_path}: {e}") from e

        self._last_key = None
        self._reached = False
        logger.info(f"Cleared checkpoint for {self.entity_type}")

    def _read_record(self) -> str:
        try:
            return self.file_path.read_text(encoding='utf-8').strip()
        except FileNotFoundError:
            return ""
        except OSError as e:
            raise PersistenceError(f"Unable to read checkpoint {self.file_path}: {e}") from e
