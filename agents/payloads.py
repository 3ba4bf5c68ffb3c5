# agents/payloads.py
"""
Payload models shared by the classification client and the agents
"""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

class PayloadKind(str, Enum):
    IMAGE = "image"
    TEXT = "text"

class NormalizedPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: PayloadKind
    data: str = Field(..., description="Base64 image data without data-URI prefix, or trimmed text")
    mime_type: Optional[str] = None
