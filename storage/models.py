# storage/models.py
"""
Pydantic models for persisted lists, crop plans and tasks
"""
from datetime import datetime, timezone
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OwnerKind(str, Enum):
    """Owner collections; the value is the key used in the persisted document"""
    LIST = "lists"
    CROP_PLAN = "cropPlans"


class Task(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: str
    text: str
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    parent_id: str = Field(..., alias="parentId")


class Owner(BaseModel):
    """A generic to-do list or a crop plan"""
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: str
    kind: OwnerKind
    title: str
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    metadata: Dict[str, Any] = Field(default_factory=dict)
    tasks: List[Task] = Field(default_factory=list)
