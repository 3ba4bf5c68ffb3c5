# agents/soil/agent.py
"""
Soil report agent using Google Generative AI
"""

from typing import Optional, Type

from agents.base import BaseAgent
from agents.classifier import ClassificationClient
from agents.soil.models import SoilAnalysisRequest, SoilReport
from core.cache import CacheManager
from core.exceptions import InputError

class SoilAnalysisAgent(BaseAgent[SoilAnalysisRequest, SoilReport]):
    """
    Soil analysis agent producing a short plain-text report for a target crop
    """

    def __init__(self, client: Optional[ClassificationClient] = None, cache: Optional[CacheManager] = None):
        super().__init__("soil", cache=cache)

        self.client = client or ClassificationClient(
            api_key=self.settings.gemini_api_key,
            temperature=self.settings.classifier_temperature,
            default_models=self.settings.classifier_models,
        )
        self.max_soil_data_chars = int(self.config.get("max_soil_data_chars", 8000))

    def _validate_config(self) -> None:
        """Validate soil agent configuration"""
        if "max_soil_data_chars" not in self.config:
            self.logger.debug("Optional config max_soil_data_chars not set, using defaults")

    def _get_response_class(self) -> Type[SoilReport]:
        return SoilReport

    async def process_request(self, request: SoilAnalysisRequest) -> SoilReport:
        """Analyze soil data for the requested crop"""
        crop = request.crop.strip()
        soil_data = request.soil_data.strip()
        if not crop:
            raise InputError("Please select the crop you're planning to grow")
        if not soil_data:
            raise InputError("Please provide soil data")
        if len(soil_data) > self.max_soil_data_chars:
            raise InputError(f"Soil data is too long (limit {self.max_soil_data_chars} characters)")

        self.logger.info(f"Starting soil analysis for {crop}")
        report = await self.client.classify(None, self._get_prompt(crop, soil_data))

        return SoilReport(success=True, crop=crop, report=report)

    def get_fallback_response(self, request: SoilAnalysisRequest, error: Exception) -> SoilReport:
        """Apology report when no model could produce one"""
        return SoilReport(
            success=False,
            crop=request.crop.strip(),
            report=(
                "Sorry, there was an error analyzing your soil data. "
                "Please check your internet connection and try again."
            ),
        )

    def _get_prompt(self, crop: str, soil_data: str) -> str:
        """Report template; the answer is plain text, not JSON"""
        return f"""Analyze soil data for {crop} cultivation. Provide a concise professional report.

Soil Data: {soil_data}

Format response as follows (no markdown symbols, keep it brief):

SOIL HEALTH
Condition: [Good/Fair/Poor]
Main issues: [List key problems]

NUTRIENTS
pH: [Value] - [Interpretation]
Nitrogen: [Status]
Phosphorus: [Status]
Potassium: [Status]
Organic matter: [Percentage]

FERTILIZER FOR {crop.upper()}
Primary: [Fertilizer type and rate]
Secondary: [Additional fertilizers if needed]
Timing: [When to apply]

IMPROVEMENTS NEEDED
Immediate: [Quick fixes]
Long-term: [Future actions]

CROP MANAGEMENT
Best planting: [Season/month]
Water needs: [Frequency]
Expected yield: [Amount per area]

WATCH FOR
Risks: [Key problems to monitor]
Prevention: [How to avoid issues]

Keep all responses short, factual, and actionable. No formatting symbols or verbose explanations."""
