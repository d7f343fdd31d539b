"""Composable schema objects that report defects as data.

Every schema exposes :meth:`Schema.validate`, which never raises for malformed
input. Instead it returns a :class:`ValidationOutcome` holding the original
value and a list of :class:`Issue` records, each addressed by a field path
from the validated root (``navigation.links[0].label``).

The building blocks mirror the shapes found in site configuration files:
strings, numbers, booleans, closed choices, lists with length bounds, free-form
mappings, objects with required/optional fields, type-switched unions, and
cross-field refinements that only run once an object's own fields are valid.

Examples
--------
>>> from siteforge.schema.core import Obj, Text, optional, required
>>> schema = Obj({"name": required(Text()), "tagline": optional(Text())})
>>> schema.validate({"name": "Atelier"}).ok
True
>>> [str(issue) for issue in schema.validate({"name": "  "}).issues]
['name: Must not be empty']
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import re
import typing as typ

PathPart = str | int
Location = tuple[PathPart, ...]

ROOT_LABEL = "(root)"


def format_path(location: cabc.Sequence[PathPart]) -> str:
    """Render a location tuple as ``key.child[2].leaf``."""
    rendered = ""
    for part in location:
        if isinstance(part, int):
            rendered += f"[{part}]"
        elif rendered:
            rendered += f".{part}"
        else:
            rendered = str(part)
    return rendered


@dc.dataclass(frozen=True, slots=True)
class Issue:
    """A single validation defect or warning addressed by its field path."""

    location: Location
    message: str

    @property
    def path(self) -> str:
        """Return the dotted path, or ``(root)`` for the document itself."""
        return format_path(self.location) or ROOT_LABEL

    def prefixed(self, prefix: cabc.Sequence[PathPart]) -> Issue:
        """Return a copy of the issue relocated beneath ``prefix``."""
        return Issue((*prefix, *self.location), self.message)

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dc.dataclass(slots=True)
class ValidationOutcome:
    """Result of running a schema: the input value plus any issues found."""

    value: typ.Any
    issues: list[Issue] = dc.field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Return ``True`` when the value satisfied the schema."""
        return not self.issues


def describe(value: object) -> str:
    """Name the JSON-ish kind of ``value`` for type-mismatch messages."""
    match value:
        case None:
            return "null"
        case bool():
            return "boolean"
        case int() | float():
            return "number"
        case str():
            return "string"
        case cabc.Mapping():
            return "object"
        case list() | tuple():
            return "array"
        case _:
            return type(value).__name__


def is_number(value: object) -> bool:
    """Return ``True`` for ints and floats, excluding booleans."""
    return isinstance(value, int | float) and not isinstance(value, bool)


class Schema:
    """Base class for all schemas.

    Subclasses implement :meth:`check`, appending issues to the shared list
    rather than raising, so one pass reports every defect in a document.
    """

    def validate(self, value: object) -> ValidationOutcome:
        """Validate ``value`` and return the collected issues."""
        issues: list[Issue] = []
        self.check(value, (), issues)
        return ValidationOutcome(value=value, issues=issues)

    def check(self, value: object, location: Location, issues: list[Issue]) -> None:
        """Append issues describing why ``value`` does not match the schema."""
        raise NotImplementedError


class AnyValue(Schema):
    """Accept anything."""

    def check(self, value: object, location: Location, issues: list[Issue]) -> None:
        return None


class Text(Schema):
    """A string, optionally trimmed and bounded in length or pattern."""

    def __init__(
        self,
        *,
        min_length: int = 1,
        message: str = "Must not be empty",
        trim: bool = True,
        pattern: re.Pattern[str] | None = None,
        pattern_message: str = "Invalid format",
    ) -> None:
        self.min_length = min_length
        self.message = message
        self.trim = trim
        self.pattern = pattern
        self.pattern_message = pattern_message

    def check(self, value: object, location: Location, issues: list[Issue]) -> None:
        if not isinstance(value, str):
            issues.append(Issue(location, f"Expected string, received {describe(value)}"))
            return
        text = value.strip() if self.trim else value
        if len(text) < self.min_length:
            issues.append(Issue(location, self.message))
            return
        if self.pattern is not None and not self.pattern.search(text):
            issues.append(Issue(location, self.pattern_message))


class Number(Schema):
    """A real number with optional inclusive bounds."""

    def __init__(self, *, minimum: float | None = None, maximum: float | None = None) -> None:
        self.minimum = minimum
        self.maximum = maximum

    def check(self, value: object, location: Location, issues: list[Issue]) -> None:
        if not is_number(value):
            issues.append(Issue(location, f"Expected number, received {describe(value)}"))
            return
        number = typ.cast(float, value)
        if self.minimum is not None and number < self.minimum:
            issues.append(Issue(location, f"Number must be greater than or equal to {self.minimum:g}"))
        if self.maximum is not None and number > self.maximum:
            issues.append(Issue(location, f"Number must be less than or equal to {self.maximum:g}"))


class Boolean(Schema):
    """A boolean flag."""

    def check(self, value: object, location: Location, issues: list[Issue]) -> None:
        if not isinstance(value, bool):
            issues.append(Issue(location, f"Expected boolean, received {describe(value)}"))


class Choice(Schema):
    """One of a closed set of literal values."""

    def __init__(self, *options: object) -> None:
        self.options = options

    def check(self, value: object, location: Location, issues: list[Issue]) -> None:
        if isinstance(value, bool) or value not in self.options:
            expected = " | ".join(repr(option) for option in self.options)
            issues.append(Issue(location, f"Invalid value. Expected {expected}, received {value!r}"))


class ListOf(Schema):
    """A list whose items share one schema, with optional length bounds."""

    def __init__(
        self,
        item: Schema,
        *,
        min_items: int | None = None,
        max_items: int | None = None,
        min_message: str | None = None,
        max_message: str | None = None,
    ) -> None:
        self.item = item
        self.min_items = min_items
        self.max_items = max_items
        self.min_message = min_message or f"Array must contain at least {min_items} element(s)"
        self.max_message = max_message or f"Array must contain at most {max_items} element(s)"

    def check(self, value: object, location: Location, issues: list[Issue]) -> None:
        if not isinstance(value, list):
            issues.append(Issue(location, f"Expected array, received {describe(value)}"))
            return
        if self.min_items is not None and len(value) < self.min_items:
            issues.append(Issue(location, self.min_message))
        if self.max_items is not None and len(value) > self.max_items:
            issues.append(Issue(location, self.max_message))
        for index, item in enumerate(value):
            self.item.check(item, (*location, index), issues)


class MappingOf(Schema):
    """A free-form mapping with string keys and uniformly typed values."""

    def __init__(
        self,
        values: Schema | None = None,
        *,
        key_message: str = "Key must not be empty",
    ) -> None:
        self.values = values or AnyValue()
        self.key_message = key_message

    def check(self, value: object, location: Location, issues: list[Issue]) -> None:
        if not isinstance(value, cabc.Mapping):
            issues.append(Issue(location, f"Expected object, received {describe(value)}"))
            return
        for key, item in value.items():
            if not isinstance(key, str) or not key:
                issues.append(Issue((*location, str(key)), self.key_message))
                continue
            self.values.check(item, (*location, key), issues)


@dc.dataclass(frozen=True, slots=True)
class Field:
    """An object member: its schema and whether it must be present."""

    schema: Schema
    required: bool = True


def required(schema: Schema) -> Field:
    """Declare a mandatory object member."""
    return Field(schema, required=True)


def optional(schema: Schema) -> Field:
    """Declare an optional object member; ``None`` counts as absent."""
    return Field(schema, required=False)


@dc.dataclass(frozen=True, slots=True)
class Refinement:
    """A cross-field rule evaluated once an object's own fields are valid."""

    predicate: cabc.Callable[[cabc.Mapping[str, typ.Any]], bool]
    message: str
    location: Location = ()


class Obj(Schema):
    """A mapping with declared members and optional cross-field rules.

    Undeclared keys are ignored so authors can carry presentation hints the
    pipeline does not know about.
    """

    def __init__(
        self,
        fields: cabc.Mapping[str, Field],
        *,
        refinements: cabc.Sequence[Refinement] = (),
    ) -> None:
        self.fields = dict(fields)
        self.refinements = tuple(refinements)

    def refine(
        self,
        predicate: cabc.Callable[[cabc.Mapping[str, typ.Any]], bool],
        message: str,
        location: Location = (),
    ) -> Obj:
        """Return a copy of the schema with an extra cross-field rule."""
        return Obj(
            self.fields,
            refinements=(*self.refinements, Refinement(predicate, message, location)),
        )

    def check(self, value: object, location: Location, issues: list[Issue]) -> None:
        if not isinstance(value, cabc.Mapping):
            issues.append(Issue(location, f"Expected object, received {describe(value)}"))
            return
        before = len(issues)
        for name, member in self.fields.items():
            item = value.get(name)
            if item is None:
                if member.required:
                    issues.append(Issue((*location, name), "Required"))
                continue
            member.schema.check(item, (*location, name), issues)
        if len(issues) > before:
            return
        for rule in self.refinements:
            if not rule.predicate(value):
                issues.append(Issue((*location, *rule.location), rule.message))


class Union(Schema):
    """Select a branch schema by the Python type of the value."""

    def __init__(
        self,
        *branches: tuple[type | tuple[type, ...], Schema],
        expected: str,
    ) -> None:
        self.branches = branches
        self.expected = expected

    def check(self, value: object, location: Location, issues: list[Issue]) -> None:
        for kinds, schema in self.branches:
            if isinstance(value, kinds) and not isinstance(value, bool):
                schema.check(value, location, issues)
                return
        issues.append(Issue(location, f"Expected {self.expected}, received {describe(value)}"))


__all__ = [
    "ROOT_LABEL",
    "AnyValue",
    "Boolean",
    "Choice",
    "Field",
    "Issue",
    "ListOf",
    "Location",
    "MappingOf",
    "Number",
    "Obj",
    "Refinement",
    "Schema",
    "Text",
    "Union",
    "ValidationOutcome",
    "describe",
    "format_path",
    "is_number",
    "optional",
    "required",
]
