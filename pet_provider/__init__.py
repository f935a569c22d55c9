"""
pet-provider: a content-provider style gateway over a table of pet records.

Requests are addressed by content URIs, write payloads are validated before
they reach the backing store, and successful mutations publish change
notifications to observers of the affected URI.
"""

from pet_provider.core.errors import (
    GatewayError,
    StoreFailure,
    UnrecognizedAddress,
    UnsupportedOperation,
)
from pet_provider.core.models import Gender, PetFields
from pet_provider.core.validators import ValidationError
from pet_provider.provider import PetProvider, ResultSet

__version__ = "1.0.0"

__all__ = [
    "Gender",
    "GatewayError",
    "PetFields",
    "PetProvider",
    "ResultSet",
    "StoreFailure",
    "UnrecognizedAddress",
    "UnsupportedOperation",
    "ValidationError",
]
