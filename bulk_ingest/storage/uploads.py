"""File source for uploaded tables.

Uploads are saved by the HTTP layer into a single directory; a job only
carries the file name. The engine loads the table through a FileSource and
deletes the file once processing has completed.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from bulk_ingest.io.table_reader import read_table
from bulk_ingest.jobs.errors import SourceUnavailable

logger = logging.getLogger(__name__)


class FileSource(ABC):
    """Abstract access to the raw input of a job."""

    @abstractmethod
    def load(self, reference: str) -> List[List[Any]]:
        """Parse the referenced file into rows. Raises SourceUnavailable."""
        ...

    @abstractmethod
    def exists(self, reference: str) -> bool:
        ...

    @abstractmethod
    def delete(self, reference: str) -> None:
        ...


class LocalFileSource(FileSource):
    """Reads uploads from a local directory."""

    def __init__(self, base_dir: str):
        self._base_dir = os.path.abspath(base_dir)
        os.makedirs(self._base_dir, exist_ok=True)

    @property
    def base_dir(self) -> str:
        return self._base_dir

    def get_path(self, reference: str) -> Optional[str]:
        """Absolute path for a reference, or None if it escapes base_dir."""
        path = os.path.abspath(os.path.join(self._base_dir, reference))
        if os.path.commonpath([self._base_dir, path]) != self._base_dir:
            return None
        return path

    def exists(self, reference: str) -> bool:
        path = self.get_path(reference)
        return path is not None and os.path.isfile(path)

    def load(self, reference: str) -> List[List[Any]]:
        path = self.get_path(reference)
        if path is None:
            raise SourceUnavailable(reference, "outside upload directory")
        if not os.path.isfile(path):
            raise SourceUnavailable(reference, "file not found")
        try:
            return read_table(path)
        except Exception as e:
            raise SourceUnavailable(reference, str(e)) from e

    def delete(self, reference: str) -> None:
        path = self.get_path(reference)
        if path is None or not os.path.exists(path):
            return
        os.remove(path)
        logger.debug(f"Deleted source file {path}")
