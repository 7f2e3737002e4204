"""Input sanitizing helpers applied before validation."""

from collections.abc import Iterable, Mapping
from typing import Any

from docgate.domain.entities.field_rule import FieldRule


def filter_by_props(data: Mapping[str, Any], prop_names: Iterable[str]) -> dict[str, Any]:
    """Keep only the allow-listed properties of incoming data.

    Prevents mass-assignment: anything not declared for the collection
    (including metadata such as ``createdBy``) is dropped.

    Args:
        data: Incoming request data.
        prop_names: The collection's property allow-list.

    Returns:
        A new dict containing only allow-listed keys present in data.
    """
    return {name: data[name] for name in prop_names if name in data}


def apply_defaults(data: Mapping[str, Any], rules: Mapping[str, FieldRule]) -> dict[str, Any]:
    """Populate absent fields that declare a default value.

    Defaults are applied before validation, so a default is itself subject
    to the field's rules.

    Args:
        data: Sanitized document data.
        rules: Field rules keyed by field name.

    Returns:
        A new dict with defaults applied.
    """
    defaulted = dict(data)
    for name, rule in rules.items():
        if rule.default is not None and name not in defaulted:
            defaulted[name] = rule.default
    return defaulted
