# storage/store.py
"""
Task/plan store: generic to-do lists and crop plans with ordered tasks.

Every call reads the whole document from the backend, mutates it and writes
it straight back. There is no locking: a second writer interleaving with
this read-modify-write can lose updates. That is acceptable for a single-user
local store; a shared backend needs a versioned conditional update instead.
"""
import logging
import uuid
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from core.config import get_settings
from core.exceptions import OwnerNotFound, StoreError
from storage.backends import Document, JsonFileBackend, StoreBackend
from storage.models import Owner, OwnerKind, Task, utc_now

logger = logging.getLogger(__name__)


class TaskPlanStore:
    """Lists and crop plans persisted through a StoreBackend"""

    def __init__(self, backend: StoreBackend):
        self.backend = backend

    # -- document helpers -------------------------------------------------

    def _load(self) -> Tuple[Document, Dict[OwnerKind, List[Owner]]]:
        document = self.backend.read()
        collections = {}
        for kind in OwnerKind:
            records = document.get(kind.value) or []
            if not isinstance(records, list):
                raise StoreError(f"Store collection {kind.value!r} is not a list")
            try:
                collections[kind] = [Owner(**{**record, "kind": kind}) for record in records]
            except (TypeError, ValidationError) as e:
                raise StoreError(f"Store collection {kind.value!r} is corrupt: {e}") from e
        return document, collections

    def _save(self, document: Document, collections: Dict[OwnerKind, List[Owner]]) -> None:
        for kind, owners in collections.items():
            document[kind.value] = [
                owner.model_dump(mode="json", by_alias=True, exclude={"kind"})
                for owner in owners
            ]
        self.backend.write(document)

    @staticmethod
    def _find(collections: Dict[OwnerKind, List[Owner]], owner_id: str) -> Optional[Owner]:
        for owners in collections.values():
            for owner in owners:
                if owner.id == owner_id:
                    return owner
        return None

    @staticmethod
    def _new_id(taken) -> str:
        new_id = uuid.uuid4().hex
        while new_id in taken:
            new_id = uuid.uuid4().hex
        return new_id

    @staticmethod
    def _all_ids(collections: Dict[OwnerKind, List[Owner]]) -> set:
        ids = set()
        for owners in collections.values():
            for owner in owners:
                ids.add(owner.id)
                ids.update(task.id for task in owner.tasks)
        return ids

    # -- queries ----------------------------------------------------------

    def list_all(self, kind: Optional[OwnerKind] = None) -> List[Owner]:
        """
        Owners in stored order.

        Generic lists are kept in creation order, crop plans newest first.
        Without ``kind`` the lists come first, then the crop plans.
        """
        _, collections = self._load()
        if kind is not None:
            return collections[kind]
        return collections[OwnerKind.LIST] + collections[OwnerKind.CROP_PLAN]

    def get_owner(self, owner_id: str) -> Owner:
        _, collections = self._load()
        owner = self._find(collections, str(owner_id))
        if owner is None:
            raise OwnerNotFound(str(owner_id))
        return owner

    def get_tasks(self, owner_id: str) -> List[Task]:
        """Tasks of one list or plan in insertion order"""
        return self.get_owner(owner_id).tasks

    # -- mutations --------------------------------------------------------

    def create(self, title: str, metadata: Optional[Dict[str, Any]] = None,
               kind: OwnerKind = OwnerKind.CROP_PLAN) -> Owner:
        """Create a list or plan; crop plans go to the front, lists to the back"""
        document, collections = self._load()
        owner = Owner(
            id=self._new_id(self._all_ids(collections)),
            kind=kind,
            title=title,
            created_at=utc_now(),
            metadata=dict(metadata or {}),
        )
        if kind == OwnerKind.CROP_PLAN:
            collections[kind].insert(0, owner)
        else:
            collections[kind].append(owner)
        self._save(document, collections)
        logger.info(f"Created {kind.value} entry {owner.id}")
        return owner

    def add_task(self, owner_id: str, text: str) -> Task:
        """Append a task; nothing is written when the owner does not exist"""
        document, collections = self._load()
        owner = self._find(collections, str(owner_id))
        if owner is None:
            logger.warning(f"Task append to missing owner {owner_id}")
            raise OwnerNotFound(str(owner_id))

        task = Task(
            id=self._new_id(self._all_ids(collections)),
            text=text,
            created_at=utc_now(),
            parent_id=owner.id,
        )
        owner.tasks.append(task)
        self._save(document, collections)
        logger.info(f"Added task {task.id} to {owner.kind.value} entry {owner.id}")
        return task

    def create_and_add_task(self, title: str, metadata: Optional[Dict[str, Any]], text: str,
                            kind: OwnerKind = OwnerKind.CROP_PLAN) -> Tuple[Owner, Task]:
        """
        Create an owner and append one task to it.

        Two separate writes: if the append fails the new owner stays.
        """
        owner = self.create(title, metadata, kind)
        task = self.add_task(owner.id, text)
        owner.tasks.append(task)
        return owner, task

    def delete_owner(self, owner_id: str) -> Owner:
        """Remove a list or plan together with its tasks"""
        document, collections = self._load()
        owner = self._find(collections, str(owner_id))
        if owner is None:
            raise OwnerNotFound(str(owner_id))
        collections[owner.kind] = [o for o in collections[owner.kind] if o.id != owner.id]
        self._save(document, collections)
        logger.info(f"Deleted {owner.kind.value} entry {owner.id} with {len(owner.tasks)} tasks")
        return owner


@lru_cache()
def get_task_store() -> TaskPlanStore:
    """Process-wide store backed by the JSON file from settings"""
    return TaskPlanStore(JsonFileBackend(get_settings().store_path))
