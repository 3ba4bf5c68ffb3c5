# agents/diagnosis/models.py
"""
Pydantic models for the diagnosis agent
"""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Union
from datetime import datetime

from agents.payloads import NormalizedPayload, PayloadKind

class ObservationKind(str, Enum):
    WEED = "weed"
    DISEASE = "disease"
    PEST = "pest"

class Severity(str, Enum):
    NONE = "None"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    UNKNOWN = "Unknown"

class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

class RequestContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    location_hint: Optional[Coordinates] = Field(None, description="Where the observation was made")
    crop_hint: Optional[str] = Field(None, description="Crop the user believes is affected")

class DiagnosticRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    observation: ObservationKind = Field(ObservationKind.WEED, description="What the user is asking about")
    payload_kind: PayloadKind = Field(..., description="Whether payload is an image or free text")
    payload: Union[bytes, str] = Field(..., description="Raw image bytes, base64/data-URI string, or observation text")
    mime_type: Optional[str] = Field(None, description="Image mime type if known")
    context: RequestContext = Field(default_factory=RequestContext)

class SeasonalPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    intensity: float = Field(..., ge=0, le=100)

class DiagnosticResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    entity_name: str = Field(..., description="Identified weed, pest or disease")
    confidence: float = Field(..., ge=0, le=100, description="Confidence percentage")
    severity: Severity = Severity.UNKNOWN
    description: str = ""
    treatment: str = ""
    prevention: str = ""
    seasonal_activity: List[SeasonalPoint] = Field(default_factory=list)
    causes: List[str] = Field(default_factory=list)

class ActionSuggestion(BaseModel):
    text: str = Field(..., description="Task text offered to the user")
    plan_title: str = Field(..., description="Title used when creating a quick plan")
    affected_crops: List[str] = Field(default_factory=list, description="Planned crops this finding threatens")

class DiagnosisResponse(BaseModel):
    success: bool
    data: DiagnosticResult
    suggestion: Optional[ActionSuggestion] = None
    message: str
    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())
