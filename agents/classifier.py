# agents/classifier.py
"""
Classification client for Google Generative AI models with ordered model fallback
"""
import logging
from typing import Any, Callable, List, Optional, Sequence

from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from agents.payloads import NormalizedPayload, PayloadKind
from core.exceptions import ClassificationUnavailable, ConfigurationError

logger = logging.getLogger(__name__)

# model identifier -> chat model exposing ``ainvoke(messages)``
ModelFactory = Callable[[str], Any]


def _response_text(response: Any) -> str:
    """Flatten a chat model reply into plain text"""
    content = getattr(response, "content", response)
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        content = "".join(parts)
    return (content or "").strip() if isinstance(content, str) else ""


def build_messages(payload: Optional[NormalizedPayload], instruction: str) -> List[HumanMessage]:
    """Attach the instruction and, for images, the inline media part"""
    if payload is not None and payload.kind == PayloadKind.IMAGE:
        return [HumanMessage(content=[
            {"type": "text", "text": instruction},
            {
                "type": "image_url",
                "image_url": {"url": f"data:{payload.mime_type};base64,{payload.data}"}
            }
        ])]
    if payload is not None and payload.kind == PayloadKind.TEXT:
        return [HumanMessage(content=f"{instruction}\n\nObservation: {payload.data}")]
    return [HumanMessage(content=instruction)]


class ClassificationClient:
    """
    Sends a normalized payload and instruction to each candidate model in turn.

    The first model that answers wins. Failures are logged and the next
    candidate is tried; no model is called twice and there is no backoff.
    """

    def __init__(self, api_key: Optional[str], model_factory: Optional[ModelFactory] = None,
                 temperature: float = 0.3, default_models: Optional[Sequence[str]] = None):
        self.api_key = api_key
        self.temperature = temperature
        self.default_models = list(default_models or [])
        self._model_factory = model_factory or self._gemini_model

    def _gemini_model(self, model_name: str) -> ChatGoogleGenerativeAI:
        return ChatGoogleGenerativeAI(
            model=model_name,
            temperature=self.temperature,
            google_api_key=self.api_key,
        )

    def _redact(self, error: Exception) -> str:
        message = str(error)
        if self.api_key:
            message = message.replace(self.api_key, "***")
        return message

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def classify(self, payload: Optional[NormalizedPayload], instruction: str,
                       model_candidates: Optional[Sequence[str]] = None) -> str:
        """Return the raw text of the first candidate model that succeeds"""
        candidates = list(self.default_models if model_candidates is None else model_candidates)
        if not candidates:
            raise ConfigurationError("No classifier model candidates configured")
        if not self.api_key:
            raise ConfigurationError("GEMINI_API_KEY is not configured")

        payload_kind = payload.kind.value if payload is not None else PayloadKind.TEXT.value
        messages = build_messages(payload, instruction)
        attempted: List[str] = []
        last_error: Optional[Exception] = None

        for model_name in candidates:
            attempted.append(model_name)
            logger.info(f"Trying model {model_name} for {payload_kind} payload")
            try:
                model = self._model_factory(model_name)
                response = await model.ainvoke(messages)
                text = _response_text(response)
                if not text:
                    raise ValueError("empty response")
            except Exception as e:
                logger.warning(f"Model {model_name} failed for {payload_kind} payload: {self._redact(e)}")
                last_error = e
                continue

            logger.info(f"Model {model_name} answered ({len(text)} chars)")
            return text

        raise ClassificationUnavailable(
            f"All classifier models failed ({', '.join(attempted)}): {self._redact(last_error)}",
            last_error=last_error,
            attempted=attempted,
        )
