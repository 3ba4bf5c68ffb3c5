# storage/__init__.py
"""
Task/plan persistence package
"""

from .backends import JsonFileBackend, MemoryBackend, StoreBackend
from .models import Owner, OwnerKind, Task
from .store import TaskPlanStore, get_task_store

__all__ = [
    "JsonFileBackend", "MemoryBackend", "StoreBackend",
    "Owner", "OwnerKind", "Task",
    "TaskPlanStore", "get_task_store",
]
