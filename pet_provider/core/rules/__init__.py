"""
Ordered field rules applied to pet write payloads.
"""

from .rule_engine import PET_RULES, PetRuleEngine

__all__ = [
    "PET_RULES",
    "PetRuleEngine",
]
