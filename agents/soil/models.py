# agents/soil/models.py
"""
Pydantic models for the soil analysis agent
"""
from pydantic import BaseModel, Field
from datetime import datetime

class SoilAnalysisRequest(BaseModel):
    crop: str = Field(..., description="Crop the farmer is planning to grow")
    soil_data: str = Field(..., description="Soil test values or a free-text soil report")

class SoilReport(BaseModel):
    success: bool
    crop: str
    report: str = Field(..., description="Plain-text report with SOIL HEALTH, NUTRIENTS, ... sections")
    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())
