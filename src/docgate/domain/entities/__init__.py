"""Domain entities for DocGate.

Entities are pure Python dataclasses that represent core business concepts.
They have no dependencies on infrastructure or external frameworks.
"""

from docgate.domain.entities.collection_schema import (
    METADATA_FIELDS,
    CollectionOptions,
    CollectionSchema,
    CompositeUniqueRule,
)
from docgate.domain.entities.field_rule import (
    Comparator,
    FieldRef,
    FieldRule,
    RequiredPredicate,
    ValueType,
    bool_rule,
    enum_rule,
    fkey_rule,
    number_rule,
    string_rule,
)
from docgate.domain.entities.requester import ANONYMOUS, Requester

__all__ = [
    "ANONYMOUS",
    "METADATA_FIELDS",
    "CollectionOptions",
    "CollectionSchema",
    "Comparator",
    "CompositeUniqueRule",
    "FieldRef",
    "FieldRule",
    "RequiredPredicate",
    "Requester",
    "ValueType",
    "bool_rule",
    "enum_rule",
    "fkey_rule",
    "number_rule",
    "string_rule",
]
