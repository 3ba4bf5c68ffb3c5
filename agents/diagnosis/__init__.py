# agents/diagnosis/__init__.py
"""
Diagnosis agent package
"""

from .agent import DiagnosisAgent
from .models import DiagnosticRequest, DiagnosticResult, DiagnosisResponse

__all__ = ["DiagnosisAgent", "DiagnosticRequest", "DiagnosticResult", "DiagnosisResponse"]
