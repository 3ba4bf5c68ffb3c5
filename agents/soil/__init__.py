# agents/soil/__init__.py
"""
Soil analysis agent package
"""

from .agent import SoilAnalysisAgent
from .models import SoilAnalysisRequest, SoilReport

__all__ = ["SoilAnalysisAgent", "SoilAnalysisRequest", "SoilReport"]
