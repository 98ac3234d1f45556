"""
Form engine: seeds state from the catalog, applies edits and visibility,
validates visible fields and produces the submitted value set.
"""

import logging
from typing import Any

from .catalog import CHOICE_TYPES, FieldCatalog, FieldDescriptor, FieldType
from .dynamic_list import DynamicList
from .exceptions import (
    FieldValidationError,
    FormClosedError,
    HiddenFieldError,
    InvalidValueError,
    UnknownFieldError,
)
from .views import Control, FormPhase, FormView, ListItemControl, SubmitResult
from .visibility import is_hidden, visible_fields

logger = logging.getLogger(__name__)

CONTROL_KINDS: dict[FieldType, tuple[str, str | None]] = {
    FieldType.text: ("input", "text"),
    FieldType.email: ("input", "email"),
    FieldType.password: ("input", "password"),
    FieldType.phone: ("input", "tel"),
    FieldType.radio: ("radio-group", None),
    FieldType.select: ("select", None),
    FieldType.checkbox: ("checkbox", None),
}


def resolve_default(field: FieldDescriptor) -> str | bool:
    """Initial value for a field, decided by its type alone."""
    if field.type is FieldType.checkbox:
        return bool(field.default_checked)
    if field.type is FieldType.radio:
        if isinstance(field.default_checked, str):
            return field.default_checked
        return field.values[0].value
    return ""


class FormEngine:
    def __init__(self, catalog: FieldCatalog) -> None:
        self.catalog = catalog
        self.schema = catalog.schema
        self.state: dict[str, Any] = {}
        self.phase = FormPhase.initial
        self._failures: dict[str, FieldValidationError] = {}
        self.lists: dict[str, DynamicList] = {
            gate.list_key: DynamicList(gate.list_key, self.state) for gate in catalog.list_gates
        }

        for field in catalog:
            self.state[field.name] = resolve_default(field)
        self._settle()

    @property
    def errors(self) -> dict[str, str]:
        return {key: failure.message for key, failure in self._failures.items()}

    @property
    def error_kinds(self) -> dict[str, str]:
        return {key: failure.kind for key, failure in self._failures.items()}

    def visible_fields(self) -> list[FieldDescriptor]:
        return visible_fields(self.catalog, self.state)

    def set_value(self, name: str, value: Any) -> None:
        self._ensure_open()
        field = self.catalog.get(name)
        if field is None:
            raise UnknownFieldError(f"Unknown field '{name}'")
        if name not in self.state:
            raise HiddenFieldError(f"Field '{name}' is hidden")

        self.state[name] = self._check_value(field, value)
        self._failures.pop(name, None)
        self.phase = FormPhase.editing
        self._settle()

    def append_item(self, key: str) -> None:
        self._active_list(key).append()
        self.phase = FormPhase.editing

    def remove_item(self, key: str, index: int) -> None:
        dynamic = self._active_list(key)
        before = len(dynamic)
        dynamic.remove_at(index)
        if len(dynamic) != before:
            # Entry errors are keyed by position, which just shifted.
            self._drop_list_errors(key)
        self.phase = FormPhase.editing

    def set_item(self, key: str, index: int, value: Any) -> None:
        dynamic = self._active_list(key)
        if not isinstance(value, str):
            raise InvalidValueError(f"{key}[{index}] expects a string")
        dynamic.set_at(index, value)
        self._failures.pop(f"{key}.{index}", None)
        self.phase = FormPhase.editing

    def validate(self) -> dict[str, FieldValidationError]:
        failures: dict[str, FieldValidationError] = {}
        for field in self.visible_fields():
            failure = self.schema.fields[field.name].check(self.state.get(field.name))
            if failure is not None:
                failures[field.name] = failure

        for gate in self.catalog.list_gates:
            key = gate.list_key
            validator = self.schema.list_items.get(key)
            dynamic = self.lists[key]
            if validator is None or not dynamic.active:
                continue
            for index, item in enumerate(dynamic.items):
                failure = validator.check(
                    item,
                    key=f"{key}.{index}",
                    label=gate.dynamic_list.item_label.format(n=index + 1),
                )
                if failure is not None:
                    failures[failure.field] = failure
        return failures

    def submit(self) -> SubmitResult:
        self._ensure_open()
        self.phase = FormPhase.validating
        self._failures = self.validate()

        if self._failures:
            self.phase = FormPhase.rejected
            logger.info("Submission rejected, invalid fields: %s", ", ".join(self._failures))
            return SubmitResult(valid=False, errors=self.errors, error_kinds=self.error_kinds)

        self.phase = FormPhase.submitted
        values = self.snapshot()
        logger.info("Form submitted with %d values", len(values))
        return SubmitResult(valid=True, values=values)

    def snapshot(self) -> dict[str, Any]:
        """Flat copy of the state in catalog order, each list right after its gate."""
        values: dict[str, Any] = {}
        for field in self.catalog:
            if field.name not in self.state:
                continue
            values[field.name] = self.state[field.name]
            key = field.list_key
            if key is not None and key in self.state:
                values[key] = list(self.state[key])
        return values

    def render(self) -> FormView:
        controls = [self._render_field(field) for field in self.visible_fields()]
        return FormView(phase=self.phase, controls=controls, errors=self.errors)

    def _render_field(self, field: FieldDescriptor) -> Control:
        control, input_type = CONTROL_KINDS[field.type]
        validator = self.schema.fields[field.name]
        rendered = Control(
            name=field.name,
            label=field.label,
            type=field.type,
            control=control,
            input_type=input_type,
            placeholder=field.placeholder,
            options=field.values,
            value=self.state.get(field.name),
            error=self.errors.get(field.name),
            required=validator.required,
        )

        key = field.list_key
        if key is not None and self.lists[key].active:
            spec = field.dynamic_list
            rendered.list_key = key
            rendered.items = [
                ListItemControl(
                    name=f"{key}.{index}",
                    index=index,
                    label=spec.item_label.format(n=index + 1),
                    placeholder=spec.item_placeholder.format(n=index + 1) if spec.item_placeholder else None,
                    value=item,
                    error=self.errors.get(f"{key}.{index}"),
                )
                for index, item in enumerate(self.lists[key].items)
            ]
        return rendered

    def _check_value(self, field: FieldDescriptor, value: Any) -> str | bool:
        if field.type is FieldType.checkbox:
            if not isinstance(value, bool):
                raise InvalidValueError(f"Field '{field.name}' expects true or false")
            return value
        if not isinstance(value, str):
            raise InvalidValueError(f"Field '{field.name}' expects a string")
        if field.type in CHOICE_TYPES and value not in field.option_values:
            # A select may be cleared back to no choice.
            if not (field.type is FieldType.select and value == ""):
                raise InvalidValueError(f"'{value}' is not an option of field '{field.name}'")
        return value

    def _settle(self) -> None:
        """Drop values of hidden fields and seed revealed ones until nothing changes."""
        for _ in range(len(self.catalog) + 1):
            changed = False
            for field in self.catalog:
                hidden = is_hidden(field, self.state)
                if hidden and field.name in self.state:
                    del self.state[field.name]
                    self._failures.pop(field.name, None)
                    logger.debug("Field %s hidden, value cleared", field.name)
                    changed = True
                elif not hidden and field.name not in self.state:
                    self.state[field.name] = resolve_default(field)
                    changed = True
            if not changed:
                break
        else:
            logger.warning("Visibility rules did not settle; check hideWhen for cycles")
        self._sync_lists()

    def _sync_lists(self) -> None:
        for gate in self.catalog.list_gates:
            dynamic = self.lists[gate.list_key]
            enabled = self.state.get(gate.name) == gate.dynamic_list.enabled_when
            if enabled and not dynamic.active:
                dynamic.activate()
            elif not enabled and dynamic.active:
                dynamic.deactivate()
                self._drop_list_errors(gate.list_key)
                logger.debug("List %s closed, entries cleared", gate.list_key)

    def _drop_list_errors(self, key: str) -> None:
        prefix = f"{key}."
        for error_key in [k for k in self._failures if k.startswith(prefix)]:
            del self._failures[error_key]

    def _active_list(self, key: str) -> DynamicList:
        self._ensure_open()
        dynamic = self.lists.get(key)
        if dynamic is None:
            raise UnknownFieldError(f"Unknown list '{key}'")
        if not dynamic.active:
            raise HiddenFieldError(f"List '{key}' is hidden")
        return dynamic

    def _ensure_open(self) -> None:
        if self.phase is FormPhase.submitted:
            raise FormClosedError("Form has already been submitted")
