# agents/diagnosis/extractor.py
"""
Parses the classifier's raw answer into a DiagnosticResult.

Models wrap the JSON record in commentary or code fences, so the extractor
scans for the first brace-delimited object that decodes, validates the
required fields and sanitizes the free-text ones.
"""
import json
import logging
import math
import re
from typing import Any, Dict, List, Optional

from agents.diagnosis.models import DiagnosticResult, SeasonalPoint, Severity
from core.exceptions import MalformedResponse

logger = logging.getLogger(__name__)

NAME_KEYS = ("name", "entityName", "entity_name")
TEXT_FIELDS = ("description", "treatment", "prevention")

_decoder = json.JSONDecoder()

_PERIOD_RUNS = re.compile(r"\.{2,}")
# Any stack of bullet, numbering or quote markers at the start of a line
_LINE_MARKERS = re.compile(r"^(?:[^\S\n]*(?:[-*+](?:[^\S\n]+|$)|\d+\.(?:[^\S\n]+|$)|>[^\S\n]*))+", re.MULTILINE)
_BLANK_LINES = re.compile(r"\n\s*\n")
_WHITESPACE = re.compile(r"\s+")
_NUMBER = re.compile(r"[-+]?\d+(?:\.\d+)?")

_SEVERITY_SYNONYMS = {
    "none": Severity.NONE,
    "no": Severity.NONE,
    "low": Severity.LOW,
    "mild": Severity.LOW,
    "medium": Severity.MEDIUM,
    "moderate": Severity.MEDIUM,
    "high": Severity.HIGH,
    "severe": Severity.HIGH,
}


def sanitize(text: Any) -> str:
    """Flatten markdown-ish model prose into a single clean line"""
    if text is None:
        return ""
    text = str(text).replace("\r\n", "\n").replace("\r", "\n")
    text = _PERIOD_RUNS.sub(".", text)
    text = _LINE_MARKERS.sub("", text)
    text = _BLANK_LINES.sub("\n", text)
    text = text.replace("\n", " ")
    text = _WHITESPACE.sub(" ", text)
    return text.strip()


def find_json_object(raw_text: str) -> Optional[Dict[str, Any]]:
    """Return the first decodable JSON object embedded in raw_text"""
    start = raw_text.find("{")
    while start != -1:
        try:
            value, _ = _decoder.raw_decode(raw_text, start)
        except json.JSONDecodeError:
            value = None
        if isinstance(value, dict):
            return value
        start = raw_text.find("{", start + 1)
    return None


def _to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _NUMBER.search(value)
        if not match:
            return None
        number = float(match.group())
    else:
        return None
    return number if math.isfinite(number) else None


def clamp_percentage(value: Any) -> Optional[float]:
    """Parse ``85``, ``"85%"`` or ``"85"`` and clamp into [0, 100]; None if not numeric"""
    number = _to_number(value)
    if number is None:
        return None
    return min(max(number, 0.0), 100.0)


def parse_severity(value: Any) -> Severity:
    if not isinstance(value, str):
        return Severity.UNKNOWN
    return _SEVERITY_SYNONYMS.get(value.strip().lower(), Severity.UNKNOWN)


def _seasonal_activity(record: Dict[str, Any]) -> List[SeasonalPoint]:
    entries = record.get("seasonalActivity")
    if entries is None:
        entries = record.get("seasonalData")
    if not isinstance(entries, list):
        return []

    points = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        label = entry.get("label", entry.get("month"))
        intensity = clamp_percentage(entry.get("intensity", entry.get("occurrence")))
        if not isinstance(label, str) or not label.strip() or intensity is None:
            continue
        points.append(SeasonalPoint(label=label.strip(), intensity=intensity))
    return points


def _causes(value: Any) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    causes = [sanitize(item) for item in value if isinstance(item, (str, int, float))]
    return [cause for cause in causes if cause]


def extract(raw_text: str) -> DiagnosticResult:
    """Build a DiagnosticResult from the raw classifier answer"""
    excerpt = (raw_text or "")[:500]
    record = find_json_object(raw_text or "")
    if record is None:
        logger.error(f"No JSON object in classifier response: {excerpt!r}")
        raise MalformedResponse("Classifier response did not contain a JSON object", raw_excerpt=excerpt)

    name_key = next((key for key in NAME_KEYS if key in record), None)
    missing = [field for field in ("confidence", "severity") if field not in record]
    if name_key is None:
        missing.insert(0, "name")
    if missing:
        logger.error(f"Classifier record missing {missing}: {excerpt!r}")
        raise MalformedResponse(f"Classifier record is missing required fields: {', '.join(missing)}",
                                raw_excerpt=excerpt)

    entity_name = sanitize(record[name_key])
    if not entity_name:
        raise MalformedResponse("Classifier record has an empty name", raw_excerpt=excerpt)

    confidence = clamp_percentage(record["confidence"])
    severity = parse_severity(record["severity"])
    if confidence is None:
        confidence, severity = 0.0, Severity.UNKNOWN

    return DiagnosticResult(
        entity_name=entity_name,
        confidence=confidence,
        severity=severity,
        seasonal_activity=_seasonal_activity(record),
        causes=_causes(record.get("causes")),
        **{field: sanitize(record.get(field)) for field in TEXT_FIELDS},
    )
