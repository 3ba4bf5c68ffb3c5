# agents/diagnosis/enrichment.py
"""
Matches a diagnosed weed against the crops the user is already planning.

Enrichment is advisory: every failure path returns an empty set so the
diagnosis itself is never blocked.
"""
import logging
from typing import Any, Iterable, Mapping, Optional, Set

from agents.diagnosis.knowledge import WEED_CROP_MAPPING
from core.exceptions import StoreError
from storage.models import OwnerKind

logger = logging.getLogger(__name__)


def _contains_either_way(a: str, b: str) -> bool:
    return a in b or b in a


def _plan_crop_name(plan: Any) -> str:
    """Plans are stored owners (title) or bare crop names"""
    name = plan if isinstance(plan, str) else getattr(plan, "title", None)
    return name.strip().lower() if isinstance(name, str) else ""


def find_affected_crops(entity_name: str, user_plans: Iterable[Any],
                        mapping: Optional[Mapping[str, Iterable[str]]] = None) -> Set[str]:
    """
    Return the mapped crops threatened by ``entity_name`` that appear in the user's plans.

    Weed keys and plan crop names are both compared case-insensitively by
    substring containment in either direction.
    """
    mapping = WEED_CROP_MAPPING if mapping is None else mapping
    entity = (entity_name or "").strip().lower()
    if not entity:
        return set()

    candidate_crops = set()
    for weed, crops in mapping.items():
        if _contains_either_way(weed.lower(), entity):
            candidate_crops.update(crop.lower() for crop in crops)
    if not candidate_crops:
        return set()

    plan_crops = [name for name in map(_plan_crop_name, user_plans or ()) if name]

    return {
        crop for crop in candidate_crops
        if any(_contains_either_way(crop, planned) for planned in plan_crops)
    }


def affected_crops_from_store(entity_name: str, store,
                              mapping: Optional[Mapping[str, Iterable[str]]] = None) -> Set[str]:
    """find_affected_crops against the store's crop plans; empty if the store can't be read"""
    try:
        plans = store.list_all(OwnerKind.CROP_PLAN)
    except StoreError as e:
        logger.warning(f"Could not read crop plans for enrichment: {e}")
        return set()
    return find_affected_crops(entity_name, plans, mapping)
