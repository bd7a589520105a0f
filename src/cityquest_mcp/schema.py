"""Declarative field descriptors for tool input and output contracts.

A tool schema is an ordered mapping of argument name to :class:`Field`.
The same mapping renders the JSON Schema advertised in ``tools/list`` and
drives :func:`validate` when a tool is invoked.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any
from urllib.parse import urlsplit

from .errors import FieldViolation, ValidationError


class Kind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUM = "enum"
    ARRAY = "array"


@dataclass(frozen=True)
class Field:
    """Type and constraints of a single argument or payload field."""

    kind: Kind
    description: str = ""
    optional: bool = False
    min_length: int | None = None
    max_length: int | None = None
    minimum: float | None = None
    maximum: float | None = None
    max_items: int | None = None
    choices: tuple[str, ...] = ()
    items: Field | None = None
    format: str | None = None

    def json_schema(self) -> dict[str, Any]:
        """Render this field as a JSON Schema property."""
        if self.kind is Kind.ENUM:
            schema: dict[str, Any] = {"type": "string", "enum": list(self.choices)}
        else:
            schema = {"type": self.kind.value}
        if self.min_length is not None:
            schema["minLength"] = self.min_length
        if self.max_length is not None:
            schema["maxLength"] = self.max_length
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        if self.max_items is not None:
            schema["maxItems"] = self.max_items
        if self.format == "url":
            schema["format"] = "uri"
        if self.items is not None:
            schema["items"] = self.items.json_schema()
        if self.description:
            schema["description"] = self.description
        return schema

    def check(self, value: Any, path: str) -> list[FieldViolation]:
        """Return the violations of ``value`` against this field."""
        if self.kind is Kind.STRING:
            return self._check_string(value, path)
        if self.kind is Kind.NUMBER:
            if not _is_number(value):
                return [FieldViolation(path, "expected a number")]
            if self.minimum is not None and value < self.minimum:
                return [FieldViolation(path, f"must be >= {self.minimum:g}")]
            if self.maximum is not None and value > self.maximum:
                return [FieldViolation(path, f"must be <= {self.maximum:g}")]
            return []
        if self.kind is Kind.BOOLEAN:
            if not isinstance(value, bool):
                return [FieldViolation(path, "expected a boolean")]
            return []
        if self.kind is Kind.ENUM:
            if value not in self.choices:
                options = ", ".join(repr(c) for c in self.choices)
                return [FieldViolation(path, f"expected one of {options}")]
            return []
        if self.kind is Kind.ARRAY:
            if not isinstance(value, (list, tuple)):
                return [FieldViolation(path, "expected an array")]
            if self.max_items is not None and len(value) > self.max_items:
                return [FieldViolation(path, f"at most {self.max_items} items allowed")]
            violations: list[FieldViolation] = []
            if self.items is not None:
                for index, item in enumerate(value):
                    violations.extend(self.items.check(item, f"{path}[{index}]"))
            return violations
        raise TypeError(f"Unsupported field kind: {self.kind}")

    def _check_string(self, value: Any, path: str) -> list[FieldViolation]:
        if not isinstance(value, str):
            return [FieldViolation(path, "expected a string")]
        if self.min_length is not None and len(value) < self.min_length:
            return [FieldViolation(path, f"must be at least {self.min_length} characters")]
        if self.max_length is not None and len(value) > self.max_length:
            return [FieldViolation(path, f"must be at most {self.max_length} characters")]
        if self.format == "url" and not is_url(value):
            return [FieldViolation(path, "must be an absolute URL")]
        return []


Schema = Mapping[str, Field]


def string(description: str = "", **constraints: Any) -> Field:
    return Field(Kind.STRING, description, **constraints)


def url(description: str = "", **constraints: Any) -> Field:
    return Field(Kind.STRING, description, format="url", **constraints)


def number(description: str = "", **constraints: Any) -> Field:
    return Field(Kind.NUMBER, description, **constraints)


def boolean(description: str = "", **constraints: Any) -> Field:
    return Field(Kind.BOOLEAN, description, **constraints)


def enum(choices: tuple[str, ...], description: str = "", **constraints: Any) -> Field:
    return Field(Kind.ENUM, description, choices=choices, **constraints)


def array(items: Field, description: str = "", **constraints: Any) -> Field:
    return Field(Kind.ARRAY, description, items=items, **constraints)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (isinstance(value, float) and math.isnan(value))


def is_url(value: str) -> bool:
    """True when ``value`` parses with both a scheme and a host."""
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return bool(parts.scheme) and bool(parts.netloc)


def object_schema(fields: Schema) -> dict[str, Any]:
    """Render a field mapping as a JSON Schema object."""
    return {
        "type": "object",
        "properties": {name: f.json_schema() for name, f in fields.items()},
        "required": [name for name, f in fields.items() if not f.optional],
    }


def validate(tool: str, fields: Schema, arguments: Mapping[str, Any] | None) -> dict[str, Any]:
    """Check ``arguments`` against ``fields`` and return the accepted values.

    ``None`` values count as absent. Keys not declared in ``fields`` are
    dropped. Every violation is collected before raising.

    Raises:
        ValidationError: One or more fields failed their constraints.
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, Mapping):
        raise ValidationError(tool, [FieldViolation("arguments", "expected an object")])

    accepted: dict[str, Any] = {}
    violations: list[FieldViolation] = []
    for name, descriptor in fields.items():
        value = arguments.get(name)
        if value is None:
            if not descriptor.optional:
                violations.append(FieldViolation(name, "required"))
            continue
        problems = descriptor.check(value, name)
        if problems:
            violations.extend(problems)
        else:
            accepted[name] = value

    if violations:
        raise ValidationError(tool, violations)
    return accepted

