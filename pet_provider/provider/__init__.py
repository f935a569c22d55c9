"""
The pet content provider and its query results.
"""

from .pet_provider import PetProvider
from .result_set import ResultSet

__all__ = [
    "PetProvider",
    "ResultSet",
]
