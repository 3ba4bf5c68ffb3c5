# agents/diagnosis/agent.py
"""
Weed, pest and disease diagnosis agent using Google Generative AI
"""

import hashlib
from typing import Any, Dict, List, Optional, Type

from agents.base import BaseAgent
from agents.classifier import ClassificationClient
from agents.diagnosis.actions import build_suggestion, is_actionable, quick_plan_title
from agents.diagnosis.enrichment import affected_crops_from_store
from agents.diagnosis.extractor import extract
from agents.diagnosis.knowledge import WEED_CROP_MAPPING, WEED_CROP_MAPPING_VERSION
from agents.diagnosis.models import (
    ActionSuggestion, DiagnosisResponse, DiagnosticRequest, DiagnosticResult,
    ObservationKind, Severity
)
from agents.diagnosis.normalizer import normalize_request
from agents.diagnosis.prompts import build_diagnosis_instruction
from core.cache import CacheManager
from core.exceptions import ClassificationUnavailable

UNAVAILABLE_NAME = "Service Unavailable"
ANALYSIS_ERROR_NAME = "Analysis Error"
SENTINEL_NAMES = {UNAVAILABLE_NAME, ANALYSIS_ERROR_NAME}

class DiagnosisAgent(BaseAgent[DiagnosticRequest, DiagnosticResult]):
    """
    Diagnosis-to-action pipeline for photos and free-text observations

    Features:
    - Image or text input normalization
    - Ordered fallback across Gemini model candidates
    - Structured result extraction from free-form model output
    - Affected-crop highlighting against the user's crop plans
    - Task suggestions ready for a list or crop plan
    """

    def __init__(self, client: Optional[ClassificationClient] = None, cache: Optional[CacheManager] = None):
        super().__init__("diagnosis", cache=cache)

        self.client = client or ClassificationClient(
            api_key=self.settings.gemini_api_key,
            temperature=self.settings.classifier_temperature,
            default_models=self.settings.classifier_models,
        )
        self.max_image_bytes = self.settings.max_image_mb * 1024 * 1024
        if not self.client.configured:
            self.logger.warning("No GEMINI_API_KEY found - diagnosis requests will fail until it is set")

    def _validate_config(self) -> None:
        """Validate diagnosis agent configuration"""
        if not self.settings.classifier_models:
            self.logger.warning("CLASSIFIER_MODELS is empty - every diagnosis will be a configuration error")

        for key in ("quick_plan_area", "default_observation"):
            if key not in self.config:
                self.logger.debug(f"Optional config {key} not set, using defaults")

    def _get_response_class(self) -> Type[DiagnosticResult]:
        return DiagnosticResult

    def get_cache_key(self, request: DiagnosticRequest) -> str:
        payload = request.payload
        digest = hashlib.sha256(payload if isinstance(payload, bytes) else payload.encode("utf-8"))
        digest.update(f"|{request.mime_type}|{request.context.model_dump_json()}".encode("utf-8"))
        return f"{self.agent_name}:{request.observation.value}:{request.payload_kind.value}:{digest.hexdigest()}"

    async def process_request(self, request: DiagnosticRequest) -> DiagnosticResult:
        """Normalize, classify and extract"""
        self.logger.info(f"Processing {request.observation.value} diagnosis from {request.payload_kind.value} input")

        payload = normalize_request(request, max_bytes=self.max_image_bytes)
        instruction = build_diagnosis_instruction(request.observation, payload.kind, request.context)
        raw_text = await self.client.classify(payload, instruction)
        result = extract(raw_text)

        self.logger.info(
            f"Diagnosis completed: {result.entity_name} "
            f"(confidence: {result.confidence:.0f}, severity: {result.severity.value})"
        )
        return result

    def get_fallback_response(self, request: DiagnosticRequest, error: Exception) -> DiagnosticResult:
        """Sentinel result rendered in place of a diagnosis"""
        if isinstance(error, ClassificationUnavailable):
            return DiagnosticResult(
                entity_name=UNAVAILABLE_NAME,
                confidence=0,
                severity=Severity.UNKNOWN,
                description="The diagnosis service could not be reached. Sorry for the inconvenience.",
                treatment="Check your internet connection and try again in a few moments.",
                prevention="N/A",
                causes=[f"All classification models failed ({', '.join(error.attempted) or 'none tried'})"],
            )

        return DiagnosticResult(
            entity_name=ANALYSIS_ERROR_NAME,
            confidence=0,
            severity=Severity.UNKNOWN,
            description="Failed to analyze the input. Please try again with a clearer photo or description.",
            treatment="Retake the photo ensuring good lighting and focus.",
            prevention="N/A",
            causes=["Analysis failed because the model response could not be read"],
        )

    def suggest_action(self, result: DiagnosticResult, observation: ObservationKind,
                       store=None) -> Optional[ActionSuggestion]:
        """Task suggestion for an actionable result, with planned crops it threatens"""
        if not is_actionable(result):
            return None

        text = build_suggestion(result, observation)
        affected: List[str] = []
        if store is not None and observation == ObservationKind.WEED:
            affected = sorted(affected_crops_from_store(result.entity_name, store))

        return ActionSuggestion(text=text, plan_title=quick_plan_title(text), affected_crops=affected)

    async def diagnose(self, request: DiagnosticRequest, store=None) -> DiagnosisResponse:
        """Run the pipeline and package the result with its suggested action"""
        result = await self.execute(request)
        success = result.entity_name not in SENTINEL_NAMES
        suggestion = self.suggest_action(result, request.observation, store) if success else None

        return DiagnosisResponse(
            success=success,
            data=result,
            suggestion=suggestion,
            message=self._generate_response_message(result, success),
        )

    def _generate_response_message(self, result: DiagnosticResult, success: bool) -> str:
        if not success:
            return f"{result.entity_name}: {result.description}"

        confidence_level = "high" if result.confidence >= 80 else "medium" if result.confidence >= 60 else "low"

        if not is_actionable(result):
            urgency = "Nothing to act on. Continue regular care."
        elif result.severity == Severity.HIGH:
            urgency = "Immediate action required!"
        elif result.severity == Severity.MEDIUM:
            urgency = "Treatment recommended soon."
        else:
            urgency = "Monitor and apply preventive measures."

        return (
            f"Detected {result.entity_name} with {confidence_level} confidence "
            f"({result.confidence:.0f}%). Severity: {result.severity.value}. {urgency}"
        )

    def get_weed_crop_table(self) -> Dict[str, Any]:
        """Weed -> affected crop table used for highlighting"""
        return {
            "version": WEED_CROP_MAPPING_VERSION,
            "weeds": {weed: sorted(crops) for weed, crops in WEED_CROP_MAPPING.items()},
        }
