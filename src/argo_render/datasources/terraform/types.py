"""
Decoding of dynamically typed Terraform values.

Terraform stores every output in its state file as a pair of a value and a type descriptor. The descriptor uses the
JSON encoding of Terraform's structural type system: primitive types are strings (`"string"`, `"number"`, `"bool"`,
`"dynamic"`), collection and structural types are arrays such as `["list", "string"]`, `["map", "number"]`,
`["tuple", ["string", "bool"]]` or `["object", {"name": "string"}]`.

#parse_type() turns a descriptor into a #Type, and #Type.decode() turns a raw JSON value into the plain Python value
implied by that type. Numbers and booleans that arrive as strings are converted to their native type.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import json
import math
from typing import Any

from argo_render.datasources import Value
from argo_render.errors import ArgoRenderError


@dataclass
class TypeDecodeError(ArgoRenderError):
    """
    Raised when a type descriptor is malformed or a value does not match its type.
    """

    message: str
    path: str = ""

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


def _join(path: str, item: str | int) -> str:
    if isinstance(item, int):
        return f"{path}[{item}]"
    return f"{path}.{item}" if path else item


def _describe(raw: Any) -> str:
    match raw:
        case bool():
            return "bool"
        case int() | float():
            return "number"
        case str():
            return "string"
        case list():
            return "array"
        case dict():
            return "object"
    return type(raw).__name__


class Type(ABC):
    """
    A Terraform type. Every variant knows how to decode a raw JSON value of its own type.
    """

    def decode(self, raw: Any, path: str = "") -> Value:
        if raw is None:
            return None
        return self._decode(raw, path)

    @abstractmethod
    def _decode(self, raw: Any, path: str) -> Value: ...


@dataclass(frozen=True)
class StringType(Type):
    def _decode(self, raw: Any, path: str) -> Value:
        match raw:
            case str():
                return raw
            case bool():
                return "true" if raw else "false"
            case int() | float():
                return json.dumps(raw)
        raise TypeDecodeError(f"string required, got {_describe(raw)}", path)


@dataclass(frozen=True)
class NumberType(Type):
    def _decode(self, raw: Any, path: str) -> Value:
        value = raw
        if isinstance(raw, str):
            try:
                value = json.loads(raw.strip())
            except ValueError:
                raise TypeDecodeError(f"a number is required, got {raw!r}", path) from None
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeDecodeError(f"number required, got {_describe(raw)} {raw!r}", path)
        if isinstance(value, float) and not math.isfinite(value):
            raise TypeDecodeError(f"a finite number is required, got {raw!r}", path)
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return value


@dataclass(frozen=True)
class BoolType(Type):
    def _decode(self, raw: Any, path: str) -> Value:
        match raw:
            case bool():
                return raw
            case "true":
                return True
            case "false":
                return False
        raise TypeDecodeError(f"bool required, got {_describe(raw)} {raw!r}", path)


@dataclass(frozen=True)
class DynamicType(Type):
    """
    A value whose type is only known at runtime. It is encoded as `{"value": ..., "type": ...}`.
    """

    def _decode(self, raw: Any, path: str) -> Value:
        if not isinstance(raw, dict) or set(raw) != {"value", "type"}:
            raise TypeDecodeError("dynamic value must be an object with 'value' and 'type' keys", path)
        return parse_type(raw["type"]).decode(raw["value"], path)


@dataclass(frozen=True)
class ListType(Type):
    element: Type

    def _decode(self, raw: Any, path: str) -> Value:
        if not isinstance(raw, list):
            raise TypeDecodeError(f"array required, got {_describe(raw)}", path)
        return [self.element.decode(item, _join(path, idx)) for idx, item in enumerate(raw)]


@dataclass(frozen=True)
class SetType(ListType):
    pass


@dataclass(frozen=True)
class MapType(Type):
    element: Type

    def _decode(self, raw: Any, path: str) -> Value:
        if not isinstance(raw, dict):
            raise TypeDecodeError(f"object required, got {_describe(raw)}", path)
        return {key: self.element.decode(value, _join(path, key)) for key, value in raw.items()}


@dataclass(frozen=True)
class TupleType(Type):
    elements: tuple[Type, ...]

    def _decode(self, raw: Any, path: str) -> Value:
        if not isinstance(raw, list):
            raise TypeDecodeError(f"array required, got {_describe(raw)}", path)
        if len(raw) != len(self.elements):
            raise TypeDecodeError(f"tuple of {len(self.elements)} elements required, got {len(raw)}", path)
        return [element.decode(item, _join(path, idx)) for idx, (element, item) in enumerate(zip(self.elements, raw))]


@dataclass(frozen=True)
class ObjectType(Type):
    attributes: dict[str, Type]
    optional: frozenset[str] = field(default_factory=frozenset)

    def _decode(self, raw: Any, path: str) -> Value:
        if not isinstance(raw, dict):
            raise TypeDecodeError(f"object required, got {_describe(raw)}", path)

        unsupported = sorted(set(raw) - set(self.attributes))
        if unsupported:
            raise TypeDecodeError(f"unsupported attribute {unsupported[0]!r}", path)

        result: dict[str, Value] = {}
        for name, attr_type in self.attributes.items():
            if name not in raw:
                if name not in self.optional:
                    raise TypeDecodeError(f"missing required attribute {name!r}", path)
                result[name] = None
                continue
            result[name] = attr_type.decode(raw[name], _join(path, name))
        return result


PRIMITIVES: dict[str, Type] = {
    "string": StringType(),
    "number": NumberType(),
    "bool": BoolType(),
    "dynamic": DynamicType(),
}


def parse_type(descriptor: Any) -> Type:
    """
    Parse a Terraform type descriptor. The descriptor may be given as already decoded JSON or as a JSON string that
    encodes a collection or structural type (e.g. `'["list","string"]'`).
    """

    if isinstance(descriptor, str) and descriptor.lstrip().startswith(("[", '"')):
        try:
            descriptor = json.loads(descriptor)
        except ValueError as exc:
            raise TypeDecodeError(f"invalid type descriptor {descriptor!r}: {exc}") from exc

    match descriptor:
        case str() if descriptor in PRIMITIVES:
            return PRIMITIVES[descriptor]
        case ["list", element]:
            return ListType(parse_type(element))
        case ["set", element]:
            return SetType(parse_type(element))
        case ["map", element]:
            return MapType(parse_type(element))
        case ["tuple", list() as elements]:
            return TupleType(tuple(parse_type(element) for element in elements))
        case ["object", dict() as attributes]:
            return ObjectType({name: parse_type(attr) for name, attr in attributes.items()})
        case ["object", dict() as attributes, list() as optional]:
            unknown = [name for name in optional if name not in attributes]
            if unknown:
                raise TypeDecodeError(f"optional attribute {unknown[0]!r} is not declared in the object type")
            return ObjectType({name: parse_type(attr) for name, attr in attributes.items()}, frozenset(optional))
    raise TypeDecodeError(f"invalid type descriptor {json.dumps(descriptor)}")
