from __future__ import annotations

"""Typed view of a parsed snapshot.

The decoder yields plain ``dict``/``list``/scalar data; :func:`from_python`
wraps it in a small tagged union so the reconstructor asks for fields with
an explicit type and default instead of probing dictionaries.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Tuple, Union

from sim.safe_parse import (
    to_float,
    to_int,
    to_optional_float,
    to_optional_int,
    to_str,
)

Scalar = Union[None, bool, int, float, str]


@dataclass(frozen=True)
class ScalarValue:
    value: Scalar = None

    def to_python(self) -> Scalar:
        return self.value


@dataclass(frozen=True)
class SequenceValue:
    items: Tuple["Value", ...] = ()

    def __iter__(self) -> Iterator["Value"]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def mappings(self) -> Iterator["MappingValue"]:
        """Only the mapping items; anything else is silently skipped."""
        for item in self.items:
            if isinstance(item, MappingValue):
                yield item

    def to_python(self) -> list:
        return [item.to_python() for item in self.items]


@dataclass(frozen=True)
class MappingValue:
    fields: Dict[str, "Value"] = field(default_factory=dict)

    def __contains__(self, key: str) -> bool:
        return key in self.fields

    def raw(self, key: str) -> Any:
        node = self.fields.get(key)
        return node.to_python() if node is not None else None

    def get_int(self, key: str, default: int = 0) -> int:
        return to_int(self._scalar(key), default)

    def get_float(self, key: str, default: float = 0.0) -> float:
        return to_float(self._scalar(key), default)

    def get_str(self, key: str, default: str = "") -> str:
        return to_str(self._scalar(key), default)

    def get_optional_int(self, key: str) -> Optional[int]:
        return to_optional_int(self._scalar(key))

    def get_optional_float(self, key: str) -> Optional[float]:
        return to_optional_float(self._scalar(key))

    def get_optional_str(self, key: str) -> Optional[str]:
        value = self._scalar(key)
        return None if value is None else to_str(value)

    def get_mapping(self, key: str) -> "MappingValue":
        node = self.fields.get(key)
        return node if isinstance(node, MappingValue) else MappingValue()

    def get_sequence(self, key: str) -> SequenceValue:
        node = self.fields.get(key)
        return node if isinstance(node, SequenceValue) else SequenceValue()

    def number_map(self, key: str) -> Optional[Dict[str, float]]:
        """A ``{name: number}`` table, or ``None`` when the field is absent."""
        node = self.fields.get(key)
        if not isinstance(node, MappingValue):
            return None
        out: Dict[str, float] = {}
        for name, value in node.fields.items():
            if isinstance(value, ScalarValue):
                number = to_optional_float(value.value)
                if number is not None:
                    out[name] = int(number) if number.is_integer() else number
        return out

    def _scalar(self, key: str) -> Any:
        node = self.fields.get(key)
        if isinstance(node, ScalarValue):
            return node.value
        return None if node is None else node.to_python()

    def to_python(self) -> dict:
        return {k: v.to_python() for k, v in self.fields.items()}


Value = Union[ScalarValue, SequenceValue, MappingValue]


def from_python(obj: Any) -> Value:
    """Wrap decoded data; mapping keys are always strings."""
    if isinstance(obj, dict):
        return MappingValue({str(k): from_python(v) for k, v in obj.items()})
    if isinstance(obj, (list, tuple)):
        return SequenceValue(tuple(from_python(v) for v in obj))
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return ScalarValue(obj)
    raise TypeError(f"unsupported snapshot value {type(obj).__name__}")
