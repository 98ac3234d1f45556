"""
Validation schema derived from the catalog's declarative rules.

Each field gets a FieldValidator that checks its rules in a fixed order
(required, minLength, isEmail, pattern) and raises on the first failure.
"""

import re
from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING

from .exceptions import (
    ConfigurationError,
    FieldValidationError,
    FormatError,
    MinLengthError,
    PatternError,
    RequiredError,
)

if TYPE_CHECKING:
    from .catalog import FieldCatalog, ValidationRules

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def anchor_at_end(pattern: str) -> str:
    """Anchor unescaped $ outside character classes at the very end, as JavaScript does."""
    out: list[str] = []
    escaped = in_class = False
    for char in pattern:
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif in_class:
            in_class = char != "]"
        elif char == "[":
            in_class = True
        elif char == "$":
            out.append(r"\Z")
            continue
        out.append(char)
    return "".join(out)


def is_empty(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


class FieldValidator:
    def __init__(self, name: str, label: str, rules: "ValidationRules | None" = None) -> None:
        self.name = name
        self.label = label
        self.rules = rules
        self._pattern: re.Pattern[str] | None = None
        if rules is not None and rules.pattern:
            try:
                self._pattern = re.compile(anchor_at_end(rules.pattern))
            except re.error as exc:
                raise ConfigurationError(
                    f"Field '{name}' has an invalid pattern {rules.pattern!r}: {exc}"
                ) from exc

    @property
    def required(self) -> bool:
        return self.rules is not None and self.rules.required

    def __call__(self, value: Any, *, key: str | None = None, label: str | None = None) -> None:
        """Raise the first rule violation for value, if any."""
        rules = self.rules
        if rules is None:
            return
        key = key or self.name
        label = label or self.label
        custom = rules.error_message

        if is_empty(value):
            if rules.required:
                raise RequiredError(key, custom or f"{label} is required")
            return

        if not isinstance(value, str):
            return

        if rules.min_length is not None and len(value) < rules.min_length:
            raise MinLengthError(
                key, custom or f"{label} must be at least {rules.min_length} characters"
            )
        if rules.is_email and not EMAIL_PATTERN.fullmatch(value):
            raise FormatError(key, custom or "Please enter a valid email address")
        if self._pattern is not None and not self._pattern.search(value):
            raise PatternError(key, custom or f"{label} is invalid")

    def check(self, value: Any, **kwargs: Any) -> FieldValidationError | None:
        try:
            self(value, **kwargs)
        except FieldValidationError as exc:
            return exc
        return None


@dataclass
class Schema:
    fields: dict[str, FieldValidator] = field(default_factory=dict)
    list_items: dict[str, FieldValidator] = field(default_factory=dict)


def build_schema(catalog: "FieldCatalog") -> Schema:
    schema = Schema()
    for descriptor in catalog:
        schema.fields[descriptor.name] = FieldValidator(
            descriptor.name, descriptor.label, descriptor.validation
        )
        spec = descriptor.dynamic_list
        if spec is not None and spec.validation is not None:
            schema.list_items[descriptor.list_key] = FieldValidator(
                descriptor.list_key, spec.item_label, spec.validation
            )
    return schema
