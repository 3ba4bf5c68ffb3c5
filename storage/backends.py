# storage/backends.py
"""
Persistence backends for the task/plan store.

A backend reads and writes the whole store document at once. The store never
touches files directly, so swapping in a database only means a new backend.
"""
import copy
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from typing import Any, Dict

from core.exceptions import StoreError

logger = logging.getLogger(__name__)

Document = Dict[str, Any]


class StoreBackend(ABC):
    """Whole-document read/write, last write wins"""

    @abstractmethod
    def read(self) -> Document:
        """Return the persisted document, or an empty dict if nothing is stored yet"""
        pass

    @abstractmethod
    def write(self, document: Document) -> None:
        """Replace the persisted document"""
        pass


class MemoryBackend(StoreBackend):
    """Keeps the document in process memory"""

    def __init__(self, document: Document = None):
        self._document = copy.deepcopy(document or {})
        self.writes = 0

    def read(self) -> Document:
        return copy.deepcopy(self._document)

    def write(self, document: Document) -> None:
        self._document = copy.deepcopy(document)
        self.writes += 1


class JsonFileBackend(StoreBackend):
    """Stores the document as one JSON file, replaced atomically on every write"""

    def __init__(self, path: str):
        self.path = path

    def read(self) -> Document:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as fr:
                document = json.load(fr)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Could not read store file {self.path}: {e}") from e
        if not isinstance(document, dict):
            raise StoreError(f"Store file {self.path} does not hold a JSON object")
        return document

    def write(self, document: Document) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".store-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fw:
                    json.dump(document, fw, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StoreError(f"Could not write store file {self.path}: {e}") from e
        logger.debug(f"Wrote store document to {self.path}")
