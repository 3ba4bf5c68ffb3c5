# agents/diagnosis/prompts.py
"""
Instruction templates sent to the classifier.

Each diagnosis template spells out the JSON record the result extractor
expects, so the output contract lives in one place.
"""
from typing import Optional

from agents.diagnosis.models import ObservationKind, PayloadKind, RequestContext

RESULT_SCHEMA = """{{
  "name": "{name_hint}",
  "confidence": confidence_percentage_as_number_0_to_100,
  "severity": "None/Low/Medium/High",
  "description": "{description_hint}",
  "treatment": "Practical treatment recommendations in plain text",
  "prevention": "Prevention strategies in plain text",
  "seasonalData": [{{"month": "Jan", "occurrence": percentage_number}}, ... one entry per month],
  "causes": ["Reason 1", "Reason 2"]
}}"""

_ROLES = {
    ObservationKind.WEED: (
        "You are an expert agronomist specialized in weed identification.",
        "identify the weed species if present",
        "Name of the weed species or 'No weed detected'",
        "Brief description of the weed and identifying features",
    ),
    ObservationKind.DISEASE: (
        "You are an expert plant pathologist.",
        "identify the crop disease if present",
        "Name of the disease or 'Healthy plant'",
        "Brief description of the disease and its visible symptoms",
    ),
    ObservationKind.PEST: (
        "You are an expert entomologist advising farmers.",
        "identify the pest if present",
        "Name of the pest or 'No pest detected'",
        "Brief description of the pest and the damage it causes",
    ),
}


def describe_context(context: Optional[RequestContext]) -> str:
    lines = []
    if context and context.location_hint:
        loc = context.location_hint
        lines.append(f"Location: {loc.latitude:.2f}, {loc.longitude:.2f}")
    else:
        lines.append("Location: Not available")
    if context and context.crop_hint:
        lines.append(f"Crop: {context.crop_hint}")
    return "\n".join(lines)


def build_diagnosis_instruction(observation: ObservationKind, payload_kind: PayloadKind,
                                context: Optional[RequestContext] = None) -> str:
    """Build the instruction for a weed, disease or pest diagnosis"""
    role, task, name_hint, description_hint = _ROLES[observation]

    if payload_kind == PayloadKind.IMAGE:
        subject = f"Analyze this image and {task}."
    else:
        subject = f"Read the farmer's observation given after these instructions and {task}."

    schema = RESULT_SCHEMA.format(name_hint=name_hint, description_hint=description_hint)

    return f"""{role} {subject}
{describe_context(context)}

Provide output as a single JSON object only with these fields in plain text (no markdown):
{schema}
"""
