"""
Validation rule implementations.

Provides validators for required fields, allowed choices and numeric ranges.
"""

from .base_validator import BaseValidator, ValidationError
from .choice_validator import ChoiceValidator
from .range_validator import RangeValidator
from .required_field_validator import RequiredFieldValidator

__all__ = [
    "BaseValidator",
    "ValidationError",
    "RequiredFieldValidator",
    "ChoiceValidator",
    "RangeValidator",
]
