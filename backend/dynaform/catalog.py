"""
Pydantic models describing the field catalog, plus loading and structural checks.
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class FieldType(str, Enum):
    text = "text"
    email = "email"
    password = "password"
    phone = "phone"
    radio = "radio"
    select = "select"
    checkbox = "checkbox"


CHOICE_TYPES = {FieldType.radio, FieldType.select}


class Relation(str, Enum):
    equal = "equal"
    not_equal = "notEqual"


class CatalogModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class FieldOption(CatalogModel):
    label: str
    value: str


class ValidationRules(CatalogModel):
    required: bool = False
    min_length: int | None = Field(default=None, alias="minLength", ge=0)
    is_email: bool = Field(default=False, alias="isEmail")
    pattern: str | None = None
    error_message: str | None = Field(default=None, alias="errorMessage")


class ConditionPair(CatalogModel):
    name: str
    value: str | bool


class VisibilityCondition(CatalogModel):
    relation: Relation
    fields: list[ConditionPair] = Field(min_length=1)


class DynamicListSpec(CatalogModel):
    key: str | None = None
    enabled_when: str = Field(default="Yes", alias="enabledWhen")
    item_label: str = Field(default="Item {n}", alias="itemLabel")
    item_placeholder: str | None = Field(default=None, alias="itemPlaceholder")
    validation: ValidationRules | None = None


class FieldDescriptor(CatalogModel):
    name: str = Field(min_length=1)
    label: str
    type: FieldType
    placeholder: str | None = None
    values: list[FieldOption] = Field(default_factory=list)
    validation: ValidationRules | None = None
    hide_when: list[VisibilityCondition] = Field(default_factory=list, alias="hideWhen")
    default_checked: str | bool | None = Field(default=None, alias="defaultChecked")
    dynamic_list: DynamicListSpec | None = Field(default=None, alias="dynamicList")

    @model_validator(mode="before")
    @classmethod
    def default_label(cls, data):
        """Fields without a label are shown under their name."""
        if isinstance(data, dict) and not data.get("label") and data.get("name"):
            data = {**data, "label": data["name"]}
        return data

    @field_validator("values", mode="before")
    @classmethod
    def normalize_options(cls, v):
        """Accept plain strings as options whose label is their value."""
        if v is None:
            return []
        if isinstance(v, list):
            return [{"label": item, "value": item} if isinstance(item, str) else item for item in v]
        return v

    @property
    def option_values(self) -> list[str]:
        return [option.value for option in self.values]

    @property
    def list_key(self) -> str | None:
        if self.dynamic_list is None:
            return None
        return self.dynamic_list.key or f"{self.name}Names"


def _check_field(field: FieldDescriptor, names: set[str]) -> list[str]:
    issues: list[str] = []

    if field.type in CHOICE_TYPES and not field.values:
        issues.append(f"Field '{field.name}' of type {field.type.value} has no values")

    if field.default_checked is not None:
        if field.type is FieldType.checkbox and not isinstance(field.default_checked, bool):
            issues.append(f"Field '{field.name}' defaultChecked must be true or false")
        elif field.type is FieldType.radio and field.default_checked not in field.option_values:
            issues.append(
                f"Field '{field.name}' defaultChecked '{field.default_checked}' is not one of its values"
            )
        elif field.type not in (FieldType.checkbox, FieldType.radio):
            issues.append(f"Field '{field.name}' of type {field.type.value} cannot set defaultChecked")

    for condition in field.hide_when:
        for pair in condition.fields:
            if pair.name not in names:
                issues.append(f"Field '{field.name}' hideWhen references unknown field '{pair.name}'")
            elif pair.name == field.name:
                issues.append(f"Field '{field.name}' hideWhen references itself")

    if field.dynamic_list is not None:
        if field.type not in CHOICE_TYPES:
            issues.append(f"Field '{field.name}' declares dynamicList but is not a radio or select")
        elif field.dynamic_list.enabled_when not in field.option_values:
            issues.append(
                f"Field '{field.name}' dynamicList enabledWhen "
                f"'{field.dynamic_list.enabled_when}' is not one of its values"
            )
        templates = {
            "itemLabel": field.dynamic_list.item_label,
            "itemPlaceholder": field.dynamic_list.item_placeholder,
        }
        for option, template in templates.items():
            if template is None:
                continue
            try:
                template.format(n=1)
            except (KeyError, IndexError, ValueError, AttributeError) as exc:
                issues.append(
                    f"Field '{field.name}' dynamicList {option} {template!r} is not a valid "
                    f"template, only {{n}} is available: {exc!r}"
                )

    return issues


class FieldCatalog:
    """Ordered, immutable collection of field descriptors."""

    def __init__(self, fields: list[FieldDescriptor]) -> None:
        self.fields: tuple[FieldDescriptor, ...] = tuple(fields)
        self._by_name = {field.name: field for field in self.fields}
        self._by_list_key = {
            field.list_key: field for field in self.fields if field.list_key is not None
        }
        self._check()

        from .schema import build_schema

        # Derived once; raises on patterns that do not compile.
        self.schema = build_schema(self)

    def _check(self) -> None:
        issues: list[str] = []
        names: set[str] = set()
        for field in self.fields:
            if field.name in names:
                issues.append(f"Duplicate field name '{field.name}'")
            names.add(field.name)

        list_keys: set[str] = set()
        for field in self.fields:
            issues.extend(_check_field(field, names))
            key = field.list_key
            if key is None:
                continue
            if key in names:
                issues.append(f"Dynamic list key '{key}' collides with a field name")
            if key in list_keys:
                issues.append(f"Duplicate dynamic list key '{key}'")
            list_keys.add(key)

        if issues:
            raise ConfigurationError("Invalid field catalog: " + "; ".join(issues))

    @classmethod
    def from_data(cls, data: Any) -> "FieldCatalog":
        if not isinstance(data, list):
            raise ConfigurationError("Field catalog must be a JSON array of field descriptors")
        try:
            fields = [FieldDescriptor.model_validate(item) for item in data]
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid field descriptor: {exc}") from exc
        return cls(fields)

    def get(self, name: str) -> FieldDescriptor | None:
        return self._by_name.get(name)

    def gate_for_list(self, key: str) -> FieldDescriptor | None:
        return self._by_list_key.get(key)

    @property
    def names(self) -> list[str]:
        return [field.name for field in self.fields]

    @property
    def list_gates(self) -> list[FieldDescriptor]:
        return list(self._by_list_key.values())

    def __iter__(self):
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)


def load_catalog(path: Path) -> FieldCatalog:
    """Read and check a catalog file. Any problem is a ConfigurationError."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Cannot read field catalog {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Field catalog {path} is not valid JSON: {exc}") from exc

    catalog = FieldCatalog.from_data(data)
    logger.info("Loaded %d fields from %s", len(catalog), path)
    return catalog
