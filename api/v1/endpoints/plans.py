# api/v1/endpoints/plans.py
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from agents.diagnosis.actions import quick_plan_title
from core.config import get_settings
from storage.models import Owner, OwnerKind, Task
from storage.store import TaskPlanStore, get_task_store

router = APIRouter()

class CreateOwnerBody(BaseModel):
    title: str = Field(..., min_length=1)
    kind: OwnerKind = OwnerKind.CROP_PLAN
    metadata: Dict[str, Any] = Field(default_factory=dict)

class AddTaskBody(BaseModel):
    text: str = Field(..., min_length=1)

class QuickPlanBody(BaseModel):
    text: str = Field(..., min_length=1, description="Task text, usually the suggestion from a diagnosis")
    title: Optional[str] = Field(None, description="Defaults to the second word of the task text")
    kind: OwnerKind = OwnerKind.CROP_PLAN
    metadata: Optional[Dict[str, Any]] = None

class QuickPlanResponse(BaseModel):
    owner: Owner
    task: Task

@router.get("", response_model=List[Owner])
def list_owners(
    kind: Optional[OwnerKind] = Query(None, description="lists or cropPlans"),
    store: TaskPlanStore = Depends(get_task_store)
):
    """Lists and crop plans in stored order"""
    return store.list_all(kind)

@router.post("", response_model=Owner, status_code=201)
def create_owner(body: CreateOwnerBody, store: TaskPlanStore = Depends(get_task_store)):
    """Create a list (appended) or crop plan (inserted first)"""
    return store.create(body.title.strip(), body.metadata, body.kind)

@router.post("/quick", response_model=QuickPlanResponse, status_code=201)
def create_quick_plan(body: QuickPlanBody, store: TaskPlanStore = Depends(get_task_store)):
    """Create a plan and add the task to it in one step"""
    text = body.text.strip()
    metadata = body.metadata
    if metadata is None:
        metadata = {"area": get_settings().get_agent_config("diagnosis").get("quick_plan_area", "0.1 acres")}

    owner, task = store.create_and_add_task(body.title or quick_plan_title(text), metadata, text, body.kind)
    return QuickPlanResponse(owner=owner, task=task)

@router.get("/{owner_id}/tasks", response_model=List[Task])
def get_tasks(owner_id: str, store: TaskPlanStore = Depends(get_task_store)):
    """Tasks in insertion order"""
    return store.get_tasks(owner_id)

@router.post("/{owner_id}/tasks", response_model=Task, status_code=201)
def add_task(owner_id: str, body: AddTaskBody, store: TaskPlanStore = Depends(get_task_store)):
    """Append a task; 404 if the list or plan is gone"""
    return store.add_task(owner_id, body.text.strip())

@router.delete("/{owner_id}", response_model=Owner)
def delete_owner(owner_id: str, store: TaskPlanStore = Depends(get_task_store)):
    """Delete a list or plan and all of its tasks"""
    return store.delete_owner(owner_id)
