"""
Value Serializers

Convert arbitrary values to and from the bytes handed to a backend.

- PickleSerializer: default; any picklable Python object
- OrjsonSerializer: JSON-compatible values, readable by other languages
- NoopSerializer: identity; paired with adapters whose client marshals values
  itself, so values are not encoded twice
"""

import pickle
from typing import Any

import orjson

from tiercache.core.exceptions import SerializationError


class PickleSerializer:
    """Pickle-based serializer (highest protocol)."""

    name = "pickle"

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL):
        self.protocol = protocol

    def serialize(self, value: Any) -> bytes:
        try:
            return pickle.dumps(value, protocol=self.protocol)
        except (pickle.PicklingError, TypeError, AttributeError) as e:
            raise SerializationError.from_exception(e, serializer=self.name)

    def unserialize(self, data: bytes) -> Any:
        try:
            return pickle.loads(data)
        except (pickle.UnpicklingError, EOFError, TypeError, ValueError) as e:
            raise SerializationError.from_exception(e, serializer=self.name)


class OrjsonSerializer:
    """JSON serializer backed by orjson."""

    name = "orjson"

    def serialize(self, value: Any) -> bytes:
        try:
            return orjson.dumps(value)
        except TypeError as e:
            raise SerializationError.from_exception(e, serializer=self.name)

    def unserialize(self, data: bytes) -> Any:
        try:
            return orjson.loads(data)
        except orjson.JSONDecodeError as e:
            raise SerializationError.from_exception(e, serializer=self.name)


class NoopSerializer:
    """Identity serializer."""

    name = "noop"

    def serialize(self, value: Any) -> Any:
        return value

    def unserialize(self, data: Any) -> Any:
        return data


def default_serializer_for(adapter) -> PickleSerializer | NoopSerializer:
    """
    Pick the serializer paired with an adapter.

    Adapters that marshal values themselves get the no-op serializer.
    """
    if getattr(adapter, "serializes_values", False):
        return NoopSerializer()
    return PickleSerializer()
