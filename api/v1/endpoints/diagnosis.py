# api/v1/endpoints/diagnosis.py
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel, Field
from typing import Optional

from agents.base import agent_registry
from agents.diagnosis.agent import DiagnosisAgent
from agents.diagnosis.models import (
    Coordinates, DiagnosisResponse, DiagnosticRequest, ObservationKind, PayloadKind, RequestContext
)
from storage.store import TaskPlanStore, get_task_store

router = APIRouter()

UNKNOWN_CONTENT_TYPES = {"", "application/octet-stream", "binary/octet-stream"}

class TextDiagnosisBody(BaseModel):
    observation: ObservationKind = ObservationKind.WEED
    text: str = Field(..., description="Free-text description of what the farmer sees")
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    crop_hint: Optional[str] = None

def _get_agent() -> DiagnosisAgent:
    diagnosis_agent = agent_registry.get("diagnosis")
    if not diagnosis_agent:
        raise HTTPException(status_code=500, detail="Diagnosis agent not available")
    return diagnosis_agent

def _context(latitude: Optional[float], longitude: Optional[float], crop_hint: Optional[str]) -> RequestContext:
    location = None
    if latitude is not None and longitude is not None:
        location = Coordinates(latitude=latitude, longitude=longitude)
    return RequestContext(location_hint=location, crop_hint=crop_hint.strip() if crop_hint else None)

@router.post("/analyze-image", response_model=DiagnosisResponse)
async def analyze_image(
    image: UploadFile = File(..., description="Photo of the weed, pest or diseased plant"),
    observation: ObservationKind = Form(ObservationKind.WEED),
    latitude: Optional[float] = Form(None, ge=-90, le=90),
    longitude: Optional[float] = Form(None, ge=-180, le=180),
    crop_hint: Optional[str] = Form(None),
    store: TaskPlanStore = Depends(get_task_store)
):
    """
    Diagnose a photo.

    Returns the structured diagnosis, a suggested task and the planned crops
    the finding threatens. Classifier outages come back as an
    "Service Unavailable" result with success=false rather than an error.
    """
    diagnosis_agent = _get_agent()

    content_type = (image.content_type or "").lower()
    # Generic uploads are sniffed by the normalizer
    if content_type in UNKNOWN_CONTENT_TYPES:
        content_type = ""
    if content_type and not content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail=f"Unsupported file type: {content_type}")

    content = await image.read()
    request = DiagnosticRequest(
        observation=observation,
        payload_kind=PayloadKind.IMAGE,
        payload=content,
        mime_type=content_type or None,
        context=_context(latitude, longitude, crop_hint),
    )
    return await diagnosis_agent.diagnose(request, store=store)

@router.post("/analyze-text", response_model=DiagnosisResponse)
async def analyze_text(body: TextDiagnosisBody, store: TaskPlanStore = Depends(get_task_store)):
    """Diagnose a free-text observation"""
    diagnosis_agent = _get_agent()

    request = DiagnosticRequest(
        observation=body.observation,
        payload_kind=PayloadKind.TEXT,
        payload=body.text,
        context=_context(body.latitude, body.longitude, body.crop_hint),
    )
    return await diagnosis_agent.diagnose(request, store=store)

@router.get("/weed-crop-table")
async def get_weed_crop_table():
    """Weed to affected-crop table used to highlight plans"""
    return {"success": True, **_get_agent().get_weed_crop_table()}
