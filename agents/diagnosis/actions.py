# agents/diagnosis/actions.py
"""
Turns a diagnosis into the task text offered to the user
"""
from agents.diagnosis.models import DiagnosticResult, ObservationKind, Severity

DEFAULT_PLAN_TITLE = "My Plan"

# Names the sentinel results and "nothing found" answers use
NON_ACTIONABLE_NAMES = {
    "no weed detected", "no pest detected", "no disease detected",
    "healthy plant", "healthy", "analysis error", "service unavailable",
}

_VERBS = {
    ObservationKind.WEED: "Remove",
    ObservationKind.PEST: "Control",
    ObservationKind.DISEASE: "Treat",
}

_FALLBACK_ACTIONS = {
    ObservationKind.WEED: "Manual removal recommended",
    ObservationKind.PEST: "Inspect plants and apply recommended control",
    ObservationKind.DISEASE: "Isolate affected plants and monitor",
}


def is_actionable(result: DiagnosticResult) -> bool:
    name = result.entity_name.strip().lower()
    if not name or name in NON_ACTIONABLE_NAMES:
        return False
    if result.severity == Severity.NONE:
        return False
    if result.severity == Severity.UNKNOWN and result.confidence == 0:
        return False
    return True


def build_suggestion(result: DiagnosticResult, observation: ObservationKind = ObservationKind.WEED) -> str:
    """'Remove Pigweed - Pull seedlings before they set seed' style task text"""
    first_sentence = result.treatment.split(".")[0].strip() if result.treatment else ""
    action = first_sentence or _FALLBACK_ACTIONS[observation]
    return f"{_VERBS[observation]} {result.entity_name} - {action}"


def quick_plan_title(suggestion: str) -> str:
    """Second word of the suggestion, i.e. the start of the diagnosed name"""
    words = suggestion.split()
    return words[1] if len(words) > 1 else DEFAULT_PLAN_TITLE
