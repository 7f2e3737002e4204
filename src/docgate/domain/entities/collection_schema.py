"""Collection schema entity.

A collection schema bundles everything the access layer needs to govern one
collection: the property allow-list, the field rules, composite uniqueness
constraints, and the policy options.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from docgate.core.exceptions import InternalError
from docgate.domain.entities.field_rule import FieldRule

# Document keys maintained by the data service, never accepted from input
METADATA_FIELDS = frozenset({"id", "isActive", "created", "createdBy", "modified", "modifiedBy"})


@dataclass(frozen=True)
class CollectionOptions:
    """Policy options for a collection.

    Attributes:
        is_admin_only: Reads are restricted to admins.
        is_public_get: Reads are allowed without authentication.
        is_public_post: Creates are allowed without authentication
            (only together with no_meta_data).
        no_meta_data: Documents carry no created/modified metadata.
        allow_user_delete: Creators may hard-delete their own documents.
    """

    is_admin_only: bool = False
    is_public_get: bool = False
    is_public_post: bool = False
    no_meta_data: bool = False
    allow_user_delete: bool = False


@dataclass(frozen=True)
class CompositeUniqueRule:
    """A set of fields whose combined values must be unique in a collection."""

    name: str
    fields: tuple[str, ...]


@dataclass
class CollectionSchema:
    """Rules and policy governing one collection.

    Attributes:
        name: Collection name used by the data service.
        fields: Field rules keyed by field name, evaluated in order.
        prop_names: Allow-list of accepted input fields. Defaults to the rule names.
        unique_together: Composite uniqueness constraints.
        options: Policy options.
        path: Route path segment. Defaults to the collection name.
        full_crud: Expose the full route set instead of the basic one.
    """

    name: str
    fields: dict[str, FieldRule] = field(default_factory=dict)
    prop_names: tuple[str, ...] | None = None
    unique_together: tuple[CompositeUniqueRule, ...] = ()
    options: CollectionOptions = field(default_factory=CollectionOptions)
    path: str | None = None
    full_crud: bool = True

    def __post_init__(self) -> None:
        if not self.name:
            raise InternalError("Collection name is required")
        if self.prop_names is None:
            self.prop_names = tuple(self.fields)
        else:
            self.prop_names = tuple(self.prop_names)
        if self.path is None:
            self.path = self.name
        self.unique_together = tuple(
            rule if isinstance(rule, CompositeUniqueRule) else self._composite_from(index, rule)
            for index, rule in enumerate(self.unique_together)
        )

        reserved = METADATA_FIELDS.intersection(self.prop_names)
        if reserved:
            raise InternalError(
                f"Collection {self.name} cannot accept metadata fields: {', '.join(sorted(reserved))}"
            )

        known_fields = set(self.prop_names) | set(self.fields)
        for field_name, rule in self.fields.items():
            rule.compile(field_name, known_fields)

        for composite in self.unique_together:
            if not composite.fields:
                raise InternalError(f"Composite unique rule {composite.name} has no fields")
            unknown = [name for name in composite.fields if name not in known_fields]
            if unknown:
                raise InternalError(
                    f"Composite unique rule {composite.name} references unknown fields: "
                    f"{', '.join(unknown)}"
                )

    def _composite_from(self, index: int, fields: Sequence[str]) -> CompositeUniqueRule:
        if isinstance(fields, str):
            raise InternalError(f"Composite unique rule for {self.name} must be a list of fields")
        return CompositeUniqueRule(name=f"{self.name}_unique_{index}", fields=tuple(fields))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CollectionSchema":
        """Build a schema from a plain mapping (e.g. loaded from JSON).

        Field rules are given as mappings of FieldRule attributes; options
        as a mapping of CollectionOptions attributes. The legacy
        ``uniquePropCombination`` key is accepted as a single composite rule.
        """
        try:
            fields = {
                name: rule if isinstance(rule, FieldRule) else FieldRule(**rule)
                for name, rule in data.get("fields", {}).items()
            }
            unique_together = list(data.get("unique_together", ()))
            if "uniquePropCombination" in data:
                unique_together.append(data["uniquePropCombination"])
            options = data.get("options", {})
            if not isinstance(options, CollectionOptions):
                options = CollectionOptions(**options)
        except TypeError as e:
            raise InternalError(f"Invalid collection schema {data.get('name')}: {e}") from e

        return cls(
            name=data.get("name", ""),
            fields=fields,
            prop_names=data.get("prop_names"),
            unique_together=tuple(unique_together),
            options=options,
            path=data.get("path"),
            full_crud=data.get("full_crud", True),
        )
