# transform parsed JSON into the typed shape a Requestable declares
# strict on types, lenient on extra keys, so the wire format can grow without breaking us

from __future__ import annotations
import dataclasses
import types
from typing import Any, Union, get_args, get_origin, get_type_hints

class SchemaMismatch(ValueError):
    # raised with the JSON path of the element that did not fit
    def __init__(self, path: str, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path

_SCALARS = (str, int, float, bool, type(None))

def _is_optional(shape: Any) -> bool:
    return _is_union(shape) and type(None) in get_args(shape)

def _is_union(shape: Any) -> bool:
    return get_origin(shape) in (Union, types.UnionType)

def _type_name(value: Any) -> str:
    return "null" if value is None else type(value).__name__

def decode(shape: Any, payload: Any, path: str = "$") -> Any:
    if shape is Any:
        return payload

    if shape is None or shape is type(None):
        if payload is not None:
            raise SchemaMismatch(path, f"expected null, got {_type_name(payload)}")
        return None

    if _is_union(shape):
        if payload is None and type(None) in get_args(shape):
            return None
        errors = []
        for option in get_args(shape):
            if option is type(None):
                continue
            try:
                return decode(option, payload, path)
            except SchemaMismatch as exc:
                errors.append(str(exc))
        raise SchemaMismatch(path, "no union member matched (" + "; ".join(errors) + ")")

    origin = get_origin(shape)
    if origin is list:
        if not isinstance(payload, list):
            raise SchemaMismatch(path, f"expected array, got {_type_name(payload)}")
        (item_shape,) = get_args(shape) or (Any,)
        return [decode(item_shape, item, f"{path}[{i}]") for i, item in enumerate(payload)]

    if origin is dict:
        if not isinstance(payload, dict):
            raise SchemaMismatch(path, f"expected object, got {_type_name(payload)}")
        _, value_shape = get_args(shape) or (str, Any)
        return {key: decode(value_shape, value, f"{path}.{key}") for key, value in payload.items()}

    if dataclasses.is_dataclass(shape) and isinstance(shape, type):
        return _decode_dataclass(shape, payload, path)

    if shape is bool:
        if not isinstance(payload, bool):
            raise SchemaMismatch(path, f"expected bool, got {_type_name(payload)}")
        return payload

    if shape is int:
        # JSON true/false are bools in Python, which subclass int
        if isinstance(payload, bool) or not isinstance(payload, int):
            raise SchemaMismatch(path, f"expected int, got {_type_name(payload)}")
        return payload

    if shape is float:
        if isinstance(payload, bool) or not isinstance(payload, (int, float)):
            raise SchemaMismatch(path, f"expected float, got {_type_name(payload)}")
        try:
            return float(payload)
        except OverflowError:
            raise SchemaMismatch(path, "number too large for float") from None

    if shape is str:
        if not isinstance(payload, str):
            raise SchemaMismatch(path, f"expected string, got {_type_name(payload)}")
        return payload

    raise TypeError(f"Unsupported response shape {shape!r}")

def check_shape(shape: Any, _seen: set | None = None) -> None:
    # fail at definition time for shapes decode() could never handle
    seen = set() if _seen is None else _seen
    if shape is Any or shape is None or shape in _SCALARS:
        return

    if _is_union(shape):
        for option in get_args(shape):
            check_shape(option, seen)
        return

    origin = get_origin(shape)
    if origin is list:
        for item_shape in get_args(shape):
            check_shape(item_shape, seen)
        return
    if origin is dict:
        args = get_args(shape)
        if args:
            check_shape(args[1], seen)
        return

    if dataclasses.is_dataclass(shape) and isinstance(shape, type):
        if shape in seen:
            return
        seen.add(shape)
        try:
            hints = get_type_hints(shape)
        except NameError:
            # forward reference not defined yet, decode() resolves it later
            return
        for field in dataclasses.fields(shape):
            if field.init:
                check_shape(hints.get(field.name, Any), seen)
        return

    raise TypeError(f"Unsupported response shape {shape!r}")

def _decode_dataclass(shape: type, payload: Any, path: str) -> Any:
    if not isinstance(payload, dict):
        raise SchemaMismatch(path, f"expected object, got {_type_name(payload)}")

    hints = get_type_hints(shape)
    kwargs = {}
    for field in dataclasses.fields(shape):
        if not field.init:
            continue
        field_shape = hints.get(field.name, Any)
        field_path = f"{path}.{field.name}"
        if field.name in payload:
            kwargs[field.name] = decode(field_shape, payload[field.name], field_path)
        elif field.default is not dataclasses.MISSING or field.default_factory is not dataclasses.MISSING:
            continue
        elif _is_optional(field_shape):
            kwargs[field.name] = None
        else:
            raise SchemaMismatch(field_path, "missing required field")
    return shape(**kwargs)
