"""
Visibility rules driven by each field's hideWhen conditions.
"""

from collections.abc import Mapping
from typing import Any

from .catalog import FieldCatalog, FieldDescriptor, Relation, VisibilityCondition

_MISSING = object()


def condition_matches(condition: VisibilityCondition, state: Mapping[str, Any]) -> bool:
    """A group matches when any of its pairs holds against the live state."""
    for pair in condition.fields:
        current = state.get(pair.name, _MISSING)
        if condition.relation is Relation.equal:
            if current is not _MISSING and current == pair.value:
                return True
        elif current is _MISSING or current != pair.value:
            return True
    return False


def is_hidden(field: FieldDescriptor, state: Mapping[str, Any]) -> bool:
    return any(condition_matches(condition, state) for condition in field.hide_when)


def visible_fields(catalog: FieldCatalog, state: Mapping[str, Any]) -> list[FieldDescriptor]:
    return [field for field in catalog if not is_hidden(field, state)]

