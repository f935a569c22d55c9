"""
Data models for pet records.

Models use Pydantic for type coercion and explicit field presence.
"""

from .pet import Gender, PetFields

__all__ = [
    "Gender",
    "PetFields",
]
