"""
Pet record models: the gender enum and the typed partial record used as a
write payload.
"""

from enum import IntEnum
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError

from pet_provider.core.validators.base_validator import ValidationError


class Gender(IntEnum):
    """Allowed values of the gender column."""

    UNKNOWN = 0
    MALE = 1
    FEMALE = 2

    @classmethod
    def is_valid(cls, value: Any) -> bool:
        """Return True if value is one of the stored gender codes."""
        if isinstance(value, bool) or not isinstance(value, int):
            return False
        return value in cls._value2member_map_


def _as_integer(value: Any) -> int | None:
    """
    Coerce a payload value to an integer column value.

    Values that cannot be read as an integer become None, so the rule for
    that column reports them instead of a type error.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        # inf and nan have no integer value
        try:
            return int(value)
        except (ValueError, OverflowError):
            return None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


class PetFields(BaseModel):
    """
    A partial pet record supplied to insert or update.

    Every column is an optional slot. A slot is "present" only when it was
    passed explicitly, so a field set to None is distinguishable from a field
    that was left out.

    Attributes:
        name: Pet name (required on insert)
        breed: Breed, may be null
        gender: Gender code, see Gender (required on insert)
        weight: Weight in whole units, null or >= 0
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    breed: str | None = None
    gender: int | None = None
    weight: int | None = None

    @field_validator("name", "breed", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return _as_text(v)

    @field_validator("gender", "weight", mode="before")
    @classmethod
    def coerce_integer(cls, v):
        return _as_integer(v)

    @classmethod
    def from_values(cls, values: "Mapping[str, Any] | PetFields | None") -> "PetFields":
        """
        Build a PetFields from a column -> value mapping.

        Args:
            values: Mapping of column names to values, an existing PetFields,
                    or None for an empty payload

        Returns:
            PetFields with exactly the given columns marked present

        Raises:
            ValidationError: If the mapping names a column that is not writable
        """
        if values is None:
            return cls()
        if isinstance(values, PetFields):
            return values
        try:
            return cls.model_validate(dict(values))
        except PydanticValidationError as e:
            first = e.errors()[0]
            field_name = str(first["loc"][0]) if first["loc"] else "<payload>"
            raise ValidationError(
                rule_name="unknown_field",
                field_name=field_name,
                message=f"Column is not writable: {first['msg']}",
            ) from e

    def present(self) -> dict[str, Any]:
        """Return only the explicitly supplied columns and their values."""
        return {
            name: getattr(self, name)
            for name in type(self).model_fields
            if name in self.model_fields_set
        }

    def is_set(self, field_name: str) -> bool:
        return field_name in self.model_fields_set

    def is_empty(self) -> bool:
        return not self.model_fields_set
