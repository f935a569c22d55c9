"""
ChoiceValidator - validates a value is one of an allowed set.
"""

from typing import Any

from .base_validator import BaseValidator, ValidationError


class ChoiceValidator(BaseValidator):
    """
    Validates that a field holds one of a fixed set of values.

    Parameters:
    - choices: Iterable of allowed values (required)

    A null value fails: an enum column has no "absent" member.
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        choices = self.parameters.get("choices")
        if not choices:
            raise ValueError("ChoiceValidator requires a non-empty 'choices' parameter")
        self.choices = frozenset(int(c) for c in choices)

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        """
        Validate that the value is one of the allowed choices.

        Raises:
            ValidationError: If value is null, not an integer, or not allowed
        """
        if value is None:
            raise ValidationError(
                rule_name="choice",
                field_name=self.field_name,
                message="Field value is null"
            )

        if isinstance(value, bool) or not isinstance(value, int) or value not in self.choices:
            allowed = ", ".join(str(c) for c in sorted(self.choices))
            raise ValidationError(
                rule_name="choice",
                field_name=self.field_name,
                message=f"Value {value!r} is not one of: {allowed}"
            )

    @property
    def rule_type(self) -> str:
        return "choice"
