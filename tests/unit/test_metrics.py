"""
Unit tests for gateway metrics.
"""

import pytest

from pet_provider.contract import CONTENT_URI
from pet_provider.core.errors import UnrecognizedAddress
from pet_provider.core.validators import ValidationError
from pet_provider.observability.metrics import REGISTRY, generate_metrics


def sample(name, **labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestGatewayMetrics:
    """Tests for counters updated by PetProvider"""

    def test_successful_insert_counted(self, provider):
        before = sample("pet_provider_operations_total",
                        operation="insert", shape="collection", status="success")
        provider.insert(CONTENT_URI, {"name": "Rex", "gender": 1})
        after = sample("pet_provider_operations_total",
                       operation="insert", shape="collection", status="success")
        assert after == before + 1

    def test_validation_failure_counted(self, provider):
        before = sample("pet_provider_validation_failures_total",
                        operation="update", field_name="weight")
        with pytest.raises(ValidationError):
            provider.update(CONTENT_URI, {"weight": -1})
        after = sample("pet_provider_validation_failures_total",
                       operation="update", field_name="weight")
        assert after == before + 1

    def test_unknown_uri_counted(self, provider):
        before = sample("pet_provider_operations_total",
                        operation="delete", shape="unknown", status="rejected")
        with pytest.raises(UnrecognizedAddress):
            provider.delete("content://elsewhere/x")
        after = sample("pet_provider_operations_total",
                       operation="delete", shape="unknown", status="rejected")
        assert after == before + 1

    def test_soft_insert_failure_counted(self, refusing_provider):
        before = sample("pet_provider_insert_failures_total")
        refusing_provider.insert(CONTENT_URI, {"name": "Rex", "gender": 1})
        assert sample("pet_provider_insert_failures_total") == before + 1

    def test_exposition(self):
        assert b"pet_provider_operations_total" in generate_metrics()
