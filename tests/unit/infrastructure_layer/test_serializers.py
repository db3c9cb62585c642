"""
Unit Tests for Value Serializers
"""

from unittest.mock import MagicMock

import pytest

from tiercache.core.exceptions import SerializationError
from tiercache.infrastructure.cache.serializers import (
    NoopSerializer,
    OrjsonSerializer,
    PickleSerializer,
    default_serializer_for,
)


@pytest.mark.unit
class TestPickleSerializer:
    """Test the default serializer."""

    def test_preserves_python_types(self):
        serializer = PickleSerializer()
        value = {"ids": (1, 2), "tags": {"a"}, "none": None}
        assert serializer.unserialize(serializer.serialize(value)) == value

    def test_unpicklable_value_raises(self):
        with pytest.raises(SerializationError) as exc_info:
            PickleSerializer().serialize(lambda: None)
        assert exc_info.value.details["serializer"] == "pickle"

    def test_garbage_raises(self):
        with pytest.raises(SerializationError):
            PickleSerializer().unserialize(b"not a pickle")


@pytest.mark.unit
class TestOrjsonSerializer:
    """Test the JSON serializer."""

    def test_produces_json_bytes(self):
        assert OrjsonSerializer().serialize({"a": 1}) == b'{"a":1}'

    def test_unsupported_type_raises(self):
        with pytest.raises(SerializationError):
            OrjsonSerializer().serialize(object())

    def test_invalid_json_raises(self):
        with pytest.raises(SerializationError):
            OrjsonSerializer().unserialize(b"{")


@pytest.mark.unit
class TestPairing:
    """Test serializer selection per adapter."""

    def test_noop_is_identity(self):
        value = object()
        serializer = NoopSerializer()
        assert serializer.unserialize(serializer.serialize(value)) is value

    def test_self_serializing_adapter_gets_noop(self):
        adapter = MagicMock(serializes_values=True)
        assert isinstance(default_serializer_for(adapter), NoopSerializer)

    def test_other_adapters_get_pickle(self):
        adapter = MagicMock(serializes_values=False)
        assert isinstance(default_serializer_for(adapter), PickleSerializer)
