"""
Pydantic models for what the engine renders and returns.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from .catalog import FieldOption, FieldType


class FormPhase(str, Enum):
    initial = "initial"
    editing = "editing"
    validating = "validating"
    submitted = "submitted"
    rejected = "rejected"


class Control(BaseModel):
    name: str
    label: str
    type: FieldType
    control: str
    input_type: str | None = None
    placeholder: str | None = None
    options: list[FieldOption] = Field(default_factory=list)
    value: Any = None
    error: str | None = None
    required: bool = False
    list_key: str | None = None
    items: list["ListItemControl"] | None = None


class ListItemControl(BaseModel):
    name: str
    index: int
    label: str
    placeholder: str | None = None
    value: str = ""
    error: str | None = None


class FormView(BaseModel):
    phase: FormPhase
    controls: list[Control]
    errors: dict[str, str] = Field(default_factory=dict)


class SubmitResult(BaseModel):
    valid: bool
    errors: dict[str, str] = Field(default_factory=dict)
    error_kinds: dict[str, str] = Field(default_factory=dict)
    values: dict[str, Any] | None = None


Control.model_rebuild()
