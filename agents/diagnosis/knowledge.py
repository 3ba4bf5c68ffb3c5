# agents/diagnosis/knowledge.py
"""
Static weed -> affected crop lookup table.

Bump WEED_CROP_MAPPING_VERSION whenever entries change so stored highlights
can be traced back to the table that produced them.
"""
from types import MappingProxyType
from typing import FrozenSet, Mapping

WEED_CROP_MAPPING_VERSION = "1"

WEED_CROP_MAPPING: Mapping[str, FrozenSet[str]] = MappingProxyType({
    "bermuda grass": frozenset({"tomato", "potato", "onion", "wheat", "rice", "corn", "maize"}),
    "pigweed": frozenset({"tomato", "potato", "bean", "corn", "maize", "soybean"}),
    "crabgrass": frozenset({"rice", "wheat", "onion", "carrot"}),
    "dandelion": frozenset({"tomato", "lettuce", "spinach", "cabbage"}),
    "bindweed": frozenset({"potato", "tomato", "bean", "pea", "corn", "wheat"}),
    "chickweed": frozenset({"lettuce", "spinach", "carrot", "onion"}),
    "purslane": frozenset({"tomato", "pepper", "eggplant"}),
    "lamb's quarters": frozenset({"beet", "spinach", "chard"}),
    "johnson grass": frozenset({"corn", "maize", "sorghum", "cotton"}),
    "foxtail": frozenset({"corn", "rice", "wheat", "soybean"}),
})
