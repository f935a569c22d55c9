"""
Rule engine for validating pet write payloads.

Rules run in declaration order and checking stops at the first failure, so
a payload with several problems always reports the earliest one (name, then
gender, then weight).
"""

from typing import Any

from pet_provider.contract import (
    COLUMN_PET_GENDER,
    COLUMN_PET_NAME,
    COLUMN_PET_WEIGHT,
)
from pet_provider.core.models import Gender, PetFields
from pet_provider.core.validators import (
    BaseValidator,
    ChoiceValidator,
    RangeValidator,
    RequiredFieldValidator,
)

PET_RULES: list[dict[str, Any]] = [
    {
        "rule_name": "require_name",
        "rule_type": "required_field",
        "field_name": COLUMN_PET_NAME,
    },
    {
        "rule_name": "require_gender",
        "rule_type": "required_field",
        "field_name": COLUMN_PET_GENDER,
    },
    {
        "rule_name": "valid_gender",
        "rule_type": "choice",
        "field_name": COLUMN_PET_GENDER,
        "parameters": {"choices": [g.value for g in Gender]},
    },
    {
        "rule_name": "non_negative_weight",
        "rule_type": "range",
        "field_name": COLUMN_PET_WEIGHT,
        "parameters": {"min": 0},
    },
]


class PetRuleEngine:
    """
    Applies the pet field rules to insert and update payloads.

    Insert payloads are checked against every rule. Update payloads are
    checked only against rules whose field is present in the payload.
    """

    VALIDATOR_REGISTRY = {
        "required_field": RequiredFieldValidator,
        "choice": ChoiceValidator,
        "range": RangeValidator,
    }

    def __init__(self, rules: list[dict[str, Any]] | None = None):
        """
        Initialize the rule engine.

        Args:
            rules: Rule configurations, each containing rule_name, rule_type,
                   field_name and optional parameters. Defaults to PET_RULES.
        """
        self.rules = PET_RULES if rules is None else rules
        self.validators: list[tuple[str, BaseValidator]] = []
        self._build_validators()

    def _build_validators(self) -> None:
        for rule in self.rules:
            rule_name = rule["rule_name"]
            rule_type = rule["rule_type"]

            validator_class = self.VALIDATOR_REGISTRY.get(rule_type)
            if not validator_class:
                raise ValueError(f"Unknown rule type: {rule_type}")

            try:
                validator = validator_class(rule["field_name"], rule.get("parameters"))
            except ValueError as e:
                raise ValueError(f"Failed to create validator for rule '{rule_name}': {e}") from e
            self.validators.append((rule_name, validator))

    def check_insert(self, fields: PetFields) -> None:
        """
        Validate a payload for insertion.

        Raises:
            ValidationError: For the first rule the payload breaks
        """
        payload = fields.present()
        for _, validator in self.validators:
            validator.validate(payload.get(validator.field_name), payload)

    def check_update(self, fields: PetFields) -> None:
        """
        Validate a payload for update. Absent fields are not checked.

        Raises:
            ValidationError: For the first rule the payload breaks
        """
        payload = fields.present()
        for _, validator in self.validators:
            if validator.field_name in payload:
                validator.validate(payload[validator.field_name], payload)
