"""Field rule entities for declarative document validation.

A field rule describes the type and constraints of one document field.
Requirement can be unconditional (``True``/``False``) or conditional on
another field through a ``RequiredPredicate``.
"""

import re
from collections.abc import Collection, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Pattern

from docgate.core.exceptions import InternalError


class ValueType(str, Enum):
    """Runtime value types a field rule can require."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"


class Comparator(str, Enum):
    """Comparison operators usable in a required predicate."""

    EQ = "=="
    NE = "!="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="
    ONE_OF = "oneOf"

    @classmethod
    def parse(cls, value: Any, field_name: str) -> "Comparator":
        """Parse a comparator, rejecting unknown operators as a schema defect."""
        if isinstance(value, Comparator):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InternalError(
                f"Validation rules not formatted properly for {field_name}"
                f" - unsupported comparison operator: {value}"
            ) from None


@dataclass(frozen=True)
class FieldRef:
    """Operand that resolves to another field of the candidate document."""

    name: str


@dataclass(frozen=True)
class RequiredPredicate:
    """Conditional requirement: ``base <comparator> target``.

    Attributes:
        base: Name of the field whose value is compared.
        comparator: The comparison operator.
        target: A ``FieldRef`` resolved against the same document, or a literal.
    """

    base: str
    comparator: Comparator
    target: Any

    def fields(self) -> set[str]:
        """Names of the document fields this predicate reads."""
        names = {self.base}
        if isinstance(self.target, FieldRef):
            names.add(self.target.name)
        return names


Requirement = bool | RequiredPredicate


def compile_requirement(
    raw: Any, field_name: str, known_fields: Collection[str]
) -> Requirement:
    """Compile a raw requirement declaration into a typed requirement.

    Accepts a boolean, ``None`` (not required), a ``RequiredPredicate``, or a
    ``(base, comparator, target)`` sequence. A string target that names a
    known field becomes a ``FieldRef``; anything else is a literal.

    Raises:
        InternalError: If the declaration is malformed.
    """
    if raw is None or raw is False:
        return False
    if raw is True:
        return True

    if isinstance(raw, RequiredPredicate):
        predicate = raw
    elif isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
        if len(raw) != 3:
            raise InternalError(
                f"Validation rules not formatted properly for {field_name}"
                " - required condition must have 3 parts"
            )
        base, comparison, target = raw
        if isinstance(target, str) and target in known_fields:
            target = FieldRef(target)
        predicate = RequiredPredicate(
            base=base,
            comparator=Comparator.parse(comparison, field_name),
            target=target,
        )
    else:
        raise InternalError(
            f"Validation rules not formatted properly for {field_name}"
            f" - unsupported requirement: {raw!r}"
        )

    for name in predicate.fields():
        if name not in known_fields:
            raise InternalError(
                f"Validation rules not formatted properly for {field_name}"
                f" - {name} is not a property of the collection"
            )
    if predicate.comparator is Comparator.ONE_OF and not isinstance(predicate.target, FieldRef):
        if isinstance(predicate.target, (str, bytes)) or not isinstance(predicate.target, Collection):
            raise InternalError(
                f"Validation rules not formatted properly for {field_name}"
                " - oneOf requires a list of values"
            )
    return predicate


@dataclass
class FieldRule:
    """Type and constraints for a single document field.

    Attributes:
        type: Required runtime type of the value.
        min_length: Inclusive minimum length (strings and arrays).
        max_length: Inclusive maximum length (strings and arrays).
        min_value: Inclusive minimum value (numbers).
        max_value: Inclusive maximum value (numbers).
        values: Allowed values, like an enum.
        format: Regular expression the value must match.
        reference: Collection that must contain a document with this id.
        unique: Whether the value must be unique within the collection.
        required: Whether the value must be present (may be conditional).
        condition: Binding condition: present exactly when it holds.
        default: Value applied when the field is absent (None means no default).
    """

    type: ValueType | None = None
    min_length: int | None = None
    max_length: int | None = None
    min_value: int | float | None = None
    max_value: int | float | None = None
    values: tuple[Any, ...] | None = None
    format: str | Pattern[str] | None = None
    reference: str | None = None
    unique: bool = False
    required: Any = False
    condition: Any = None
    default: Any = None

    def __post_init__(self) -> None:
        if self.type is not None and not isinstance(self.type, ValueType):
            try:
                self.type = ValueType(self.type)
            except ValueError:
                raise InternalError(f"Unsupported field type: {self.type}") from None
        if self.values is not None:
            self.values = tuple(self.values)
        if isinstance(self.format, str):
            try:
                self.format = re.compile(self.format)
            except re.error as e:
                raise InternalError(f"Invalid format pattern {self.format!r}: {e}") from e

    def compile(self, field_name: str, known_fields: Collection[str]) -> None:
        """Compile requirement declarations against the collection's fields."""
        self.required = compile_requirement(self.required, field_name, known_fields)
        if self.condition is not None:
            self.condition = compile_requirement(self.condition, field_name, known_fields)


def string_rule(
    min_length: int | None = None,
    max_length: int | None = None,
    required: Any = False,
    unique: bool = False,
    **constraints: Any,
) -> FieldRule:
    """Rule for a string field with optional length bounds."""
    return FieldRule(
        type=ValueType.STRING,
        min_length=min_length,
        max_length=max_length,
        required=required,
        unique=unique,
        **constraints,
    )


def number_rule(
    min_value: int | float | None = None,
    max_value: int | float | None = None,
    required: Any = False,
    **constraints: Any,
) -> FieldRule:
    """Rule for a numeric field with optional value bounds."""
    return FieldRule(
        type=ValueType.NUMBER,
        min_value=min_value,
        max_value=max_value,
        required=required,
        **constraints,
    )


def bool_rule(required: Any = False, **constraints: Any) -> FieldRule:
    """Rule for a boolean field."""
    return FieldRule(type=ValueType.BOOLEAN, required=required, **constraints)


def enum_rule(
    values: Sequence[Any], required: Any = False, is_number: bool = False, **constraints: Any
) -> FieldRule:
    """Rule for a field restricted to a fixed set of values."""
    return FieldRule(
        type=ValueType.NUMBER if is_number else ValueType.STRING,
        values=tuple(values),
        required=required,
        **constraints,
    )


def fkey_rule(
    reference: str, required: Any = False, is_number: bool = False, **constraints: Any
) -> FieldRule:
    """Rule for a field holding the id of a document in another collection."""
    return FieldRule(
        type=ValueType.NUMBER if is_number else ValueType.STRING,
        reference=reference,
        required=required,
        **constraints,
    )
