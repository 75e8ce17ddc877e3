# runes/facts.py
# ------------------------------------------------------------
# Fact value model: a tagged union of String / Number / Boolean /
# Object / Array / Null, plus the named Fact held in working memory.
# ------------------------------------------------------------

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import EvaluationError


class FactValue:
    """Base of every runtime value. Accessors never coerce across variants."""

    __slots__ = ()

    def as_number(self) -> Optional[float]:
        return None

    def as_string(self) -> Optional[str]:
        return None

    def as_boolean(self) -> Optional[bool]:
        return None

    def as_object(self) -> Optional[Dict[str, "FactValue"]]:
        return None

    def as_array(self) -> Optional[List["FactValue"]]:
        return None

    def is_truthy(self) -> bool:
        raise NotImplementedError

    def to_python(self) -> Any:
        raise NotImplementedError


@dataclass(frozen=True)
class StringValue(FactValue):
    value: str

    def as_string(self) -> Optional[str]:
        return self.value

    def is_truthy(self) -> bool:
        return self.value != ""

    def to_python(self) -> Any:
        return self.value


@dataclass(frozen=True)
class NumberValue(FactValue):
    value: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", float(self.value))

    def as_number(self) -> Optional[float]:
        return self.value

    def is_truthy(self) -> bool:
        return self.value != 0.0

    def to_python(self) -> Any:
        return self.value


@dataclass(frozen=True)
class BooleanValue(FactValue):
    value: bool

    def as_boolean(self) -> Optional[bool]:
        return self.value

    def is_truthy(self) -> bool:
        return self.value

    def to_python(self) -> Any:
        return self.value


@dataclass
class ObjectValue(FactValue):
    # mutable: FieldAssignment writes into an existing object in place
    fields: Dict[str, FactValue] = field(default_factory=dict)

    def as_object(self) -> Optional[Dict[str, FactValue]]:
        return self.fields

    def is_truthy(self) -> bool:
        return bool(self.fields)

    def to_python(self) -> Any:
        return {k: v.to_python() for k, v in self.fields.items()}


@dataclass
class ArrayValue(FactValue):
    items: List[FactValue] = field(default_factory=list)

    def as_array(self) -> Optional[List[FactValue]]:
        return self.items

    def is_truthy(self) -> bool:
        return bool(self.items)

    def to_python(self) -> Any:
        return [v.to_python() for v in self.items]


@dataclass(frozen=True)
class NullValue(FactValue):
    def is_truthy(self) -> bool:
        return False

    def to_python(self) -> Any:
        return None


NULL = NullValue()


def from_python(obj: Any) -> FactValue:
    """Build a FactValue from JSON-shaped Python data."""
    if isinstance(obj, FactValue):
        return obj
    if obj is None:
        return NULL
    # bool is an int subclass, check it first
    if isinstance(obj, bool):
        return BooleanValue(obj)
    if isinstance(obj, (int, float)):
        return NumberValue(obj)
    if isinstance(obj, str):
        return StringValue(obj)
    if isinstance(obj, dict):
        return ObjectValue({str(k): from_python(v) for k, v in obj.items()})
    if isinstance(obj, (list, tuple)):
        return ArrayValue([from_python(v) for v in obj])
    raise TypeError(f"Cannot convert {type(obj).__name__} to a fact value")


# ------------ facts ------------
@dataclass
class Fact:
    name: str
    value: FactValue

    def get_field(self, field_name: str) -> Optional[FactValue]:
        obj = self.value.as_object()
        if obj is None:
            return None
        return obj.get(field_name)

    def set_field(self, field_name: str, value: FactValue) -> None:
        obj = self.value.as_object()
        if obj is None:
            raise EvaluationError("Cannot set field on non-object fact")
        obj[field_name] = value

    @classmethod
    def from_object(cls, name: str, fields: Dict[str, FactValue]) -> "Fact":
        return cls(name, ObjectValue(dict(fields)))

    @classmethod
    def string_fact(cls, name: str, value: str) -> "Fact":
        return cls(name, StringValue(value))

    @classmethod
    def number_fact(cls, name: str, value: float) -> "Fact":
        return cls(name, NumberValue(value))

    @classmethod
    def boolean_fact(cls, name: str, value: bool) -> "Fact":
        return cls(name, BooleanValue(value))

    @classmethod
    def from_python(cls, name: str, value: Any) -> "Fact":
        return cls(name, from_python(value))


def facts_from_python(data: Dict[str, Any]) -> Dict[str, Fact]:
    """{"TestCar": {"Speed": 50}} -> {"TestCar": Fact("TestCar", ObjectValue(...))}"""
    return {name: Fact.from_python(name, value) for name, value in data.items()}


def facts_to_python(facts: Dict[str, Fact]) -> Dict[str, Any]:
    return {name: fact.value.to_python() for name, fact in facts.items()}
