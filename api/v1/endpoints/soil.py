# api/v1/endpoints/soil.py
from fastapi import APIRouter, HTTPException

from agents.base import agent_registry
from agents.soil.models import SoilAnalysisRequest, SoilReport

router = APIRouter()

@router.post("/analyze", response_model=SoilReport)
async def analyze_soil(request: SoilAnalysisRequest):
    """
    Soil report for a planned crop.

    Failures of the AI service return an apology report with success=false.
    """
    soil_agent = agent_registry.get("soil")
    if not soil_agent:
        raise HTTPException(status_code=500, detail="Soil analysis agent not available")

    return await soil_agent.execute(request)
