"""Rule engine validating candidate documents against collection schemas.

Checks run per field in rule order:

1. required (possibly conditional)
2. binding condition (present exactly when the condition holds)
3. absent optional fields skip the remaining checks
4. type, length, range, allowed values, format
5. foreign key and uniqueness, which query the data service

Composite uniqueness rules run once per document after the field checks.
Every failure raises immediately; nothing is collected or downgraded.
"""

import operator
from collections.abc import Collection, Mapping
from typing import TYPE_CHECKING, Any, Callable

from docgate.core.exceptions import (
    ForbiddenError,
    InternalError,
    ServiceError,
    ValidationError,
)
from docgate.core.formatting import object_to_string
from docgate.core.logging import get_logger
from docgate.domain.entities.collection_schema import CollectionSchema, CompositeUniqueRule
from docgate.domain.entities.field_rule import (
    Comparator,
    FieldRef,
    FieldRule,
    Requirement,
    ValueType,
)

if TYPE_CHECKING:
    from docgate.infrastructure.data_services.base import DataService

logger = get_logger(__name__)

_ORDERINGS: dict[Comparator, Callable[[Any, Any], bool]] = {
    Comparator.GT: operator.gt,
    Comparator.GE: operator.ge,
    Comparator.LT: operator.lt,
    Comparator.LE: operator.le,
}


def describe_type(value: Any) -> str:
    """Name of a value's runtime type in rule vocabulary."""
    if isinstance(value, bool):
        return ValueType.BOOLEAN.value
    if isinstance(value, (int, float)):
        return ValueType.NUMBER.value
    if isinstance(value, str):
        return ValueType.STRING.value
    if isinstance(value, (list, tuple)):
        return ValueType.ARRAY.value
    return type(value).__name__


def is_number(value: Any) -> bool:
    # bool is a subclass of int in Python
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def compare(base_value: Any, comparator: Comparator, target_value: Any) -> bool:
    """Evaluate ``base_value <comparator> target_value``.

    Ordering comparisons are false when either side is None or the values
    cannot be ordered against each other.

    Raises:
        InternalError: If the comparator is not supported.
    """
    if comparator is Comparator.EQ:
        return base_value == target_value
    if comparator is Comparator.NE:
        return base_value != target_value
    if comparator is Comparator.ONE_OF:
        if isinstance(target_value, (str, bytes)) or not isinstance(target_value, Collection):
            return False
        return base_value in target_value

    ordering = _ORDERINGS.get(comparator)
    if ordering is None:
        raise InternalError(f"Unsupported comparison operator: {comparator}")
    if base_value is None or target_value is None:
        return False
    try:
        return bool(ordering(base_value, target_value))
    except TypeError:
        return False


def evaluate_requirement(requirement: Requirement | None, document: Mapping[str, Any]) -> bool:
    """Evaluate a compiled requirement against a candidate document."""
    if requirement is None or requirement is False:
        return False
    if requirement is True:
        return True
    target = requirement.target
    if isinstance(target, FieldRef):
        target = document.get(target.name)
    return compare(document.get(requirement.base), requirement.comparator, target)


class RuleEngine:
    """Validates documents against a collection schema.

    Basic checks are pure classmethods; checks against existing data are
    coroutines that use the data service passed to ``validate``.
    """

    @classmethod
    async def validate(
        cls,
        document: Mapping[str, Any] | None,
        schema: CollectionSchema,
        data_service: "DataService | None",
        collection_name: str | None = None,
        document_id: str | None = None,
    ) -> None:
        """Validate a document against every rule of a schema.

        Args:
            document: The candidate document (sanitized and defaulted).
            schema: The collection schema holding the rules.
            data_service: Data service for foreign key and uniqueness checks.
            collection_name: Collection to check uniqueness in. Defaults to the schema name.
            document_id: ID of the document being updated, ignored by uniqueness checks.

        Raises:
            ValidationError: If a field rule is violated.
            ForbiddenError: If a composite uniqueness rule is violated.
            ServiceError: If a data check is needed but no data service is available.
        """
        if document is None:
            raise ValidationError("No data")
        collection_name = collection_name or schema.name

        for prop, rule in schema.fields.items():
            await cls.validate_prop(prop, document, rule, data_service, collection_name, document_id)

        for composite in schema.unique_together:
            await cls.validate_unique_combination(
                document, composite, data_service, collection_name, document_id
            )

    @classmethod
    async def validate_prop(
        cls,
        prop: str,
        document: Mapping[str, Any],
        rule: FieldRule,
        data_service: "DataService | None",
        collection_name: str,
        document_id: str | None = None,
    ) -> None:
        """Validate a single property against its rule."""
        value = document.get(prop)
        value_is_null = value is None

        if evaluate_requirement(rule.required, document) and value_is_null:
            raise ValidationError(f"Prop {prop} is required but is null")
        if rule.condition is not None:
            if evaluate_requirement(rule.condition, document) == value_is_null:
                raise ValidationError(f"Prop {prop} fails conditional requirement")
        if value_is_null:
            return

        cls.validate_type(prop, value, rule)
        cls.validate_length(prop, value, rule)
        cls.validate_size(prop, value, rule)
        cls.validate_value(prop, value, rule)
        cls.validate_format(prop, value, rule)

        await cls.validate_foreign_key(prop, value, rule, data_service)
        await cls.validate_uniqueness(prop, value, rule, data_service, collection_name, document_id)

    @classmethod
    def validate_type(cls, prop: str, value: Any, rule: FieldRule) -> None:
        if rule.type is None:
            return
        if rule.type is ValueType.STRING:
            matches = isinstance(value, str)
        elif rule.type is ValueType.NUMBER:
            matches = is_number(value)
        elif rule.type is ValueType.BOOLEAN:
            matches = isinstance(value, bool)
        else:
            matches = isinstance(value, (list, tuple))
        if not matches:
            raise ValidationError(
                f"Prop {prop} is a(n) {describe_type(value)}, should be a(n) {rule.type.value}"
            )

    @classmethod
    def validate_length(cls, prop: str, value: Any, rule: FieldRule) -> None:
        """Inclusive min/max length of string and array values."""
        if rule.min_length is None and rule.max_length is None:
            return
        if not isinstance(value, (str, list, tuple)):
            raise ValidationError(
                f"Type mismatch: {prop} is {describe_type(value)}, cannot check max/min length"
            )
        if rule.min_length is not None and len(value) < rule.min_length:
            raise ValidationError(f"Prop {prop} does not meet minimum length of {rule.min_length}")
        if rule.max_length is not None and len(value) > rule.max_length:
            raise ValidationError(f"Prop {prop} exceeds maximum length of {rule.max_length}")

    @classmethod
    def validate_size(cls, prop: str, value: Any, rule: FieldRule) -> None:
        """Inclusive min/max value of numeric values."""
        if rule.min_value is None and rule.max_value is None:
            return
        if not is_number(value):
            raise ValidationError(
                f"Type mismatch: {prop} is {describe_type(value)}, cannot check max/min value"
            )
        if rule.min_value is not None and value < rule.min_value:
            raise ValidationError(f"Prop {prop} does not meet minimum value of {rule.min_value}")
        if rule.max_value is not None and value > rule.max_value:
            raise ValidationError(f"Prop {prop} exceeds maximum value of {rule.max_value}")

    @classmethod
    def validate_value(cls, prop: str, value: Any, rule: FieldRule) -> None:
        """Membership in the allowed value set, like an enum."""
        if rule.values is None:
            return
        if not (isinstance(value, str) or is_number(value)):
            raise ValidationError(
                f"Type mismatch: {prop} is {describe_type(value)}, cannot use like an enum"
            )
        if value not in rule.values:
            allowed = ", ".join(str(v) for v in rule.values)
            raise ValidationError(f"Prop {prop} must be one of: {allowed}")

    @classmethod
    def validate_format(cls, prop: str, value: Any, rule: FieldRule) -> None:
        if rule.format is None:
            return
        if not isinstance(value, str):
            raise ValidationError(f"{prop} format cannot be validated - not a string")
        if not rule.format.search(value):
            raise ValidationError(f"{prop} value {value} does not fit the required format")

    @classmethod
    async def validate_foreign_key(
        cls,
        prop: str,
        value: Any,
        rule: FieldRule,
        data_service: "DataService | None",
    ) -> None:
        """The referenced document must exist (and be active)."""
        if not rule.reference:
            return
        if data_service is None:
            raise ServiceError("Cannot constrain foreign key - no data service available")
        referenced = await data_service.get_document_by_id(rule.reference, str(value))
        if referenced is None:
            raise ValidationError(f"Prop {prop} is not a valid foreign key")

    @classmethod
    async def validate_uniqueness(
        cls,
        prop: str,
        value: Any,
        rule: FieldRule,
        data_service: "DataService | None",
        collection_name: str,
        document_id: str | None = None,
    ) -> None:
        if not rule.unique:
            return
        if data_service is None:
            raise ServiceError("Cannot check for uniqueness - no data service available")
        documents = await data_service.get_documents_by_prop(collection_name, prop, value)
        if any(doc.get("id") != document_id for doc in documents):
            raise ValidationError(
                f"Prop {prop} must be unique. The {collection_name} collection "
                f"already contains an item with a value of {value}"
            )

    @classmethod
    async def validate_unique_combination(
        cls,
        document: Mapping[str, Any],
        composite: CompositeUniqueRule,
        data_service: "DataService | None",
        collection_name: str,
        document_id: str | None = None,
    ) -> None:
        """The combined values of the rule's fields must not exist yet."""
        if any(document.get(name) is None for name in composite.fields):
            logger.debug(
                "Skipping composite uniqueness check with absent fields",
                collection=collection_name,
                rule=composite.name,
            )
            return
        if data_service is None:
            raise ServiceError("Cannot check for uniqueness - no data service available")

        projection = {name: document[name] for name in composite.fields}
        documents = await data_service.get_documents_by_props(
            collection_name, projection, include_inactive=False
        )
        if any(doc.get("id") != document_id for doc in documents):
            raise ForbiddenError(
                f"Data is not unique in {collection_name}: {object_to_string(projection)}"
            )
