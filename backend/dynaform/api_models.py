from typing import Any

from pydantic import BaseModel, Field

from .catalog import FieldDescriptor
from .confirmation import ConfirmationEntry
from .views import FormView


class FieldValueRequest(BaseModel):
    value: str | bool = Field(..., description="New value: a string, or true/false for checkboxes")


class ItemValueRequest(BaseModel):
    value: str = Field(..., description="New text for one dynamic list entry")


class CatalogResponse(BaseModel):
    fields: list[FieldDescriptor]


class SessionResponse(BaseModel):
    session_id: str
    view: FormView


class SubmitResponse(BaseModel):
    session_id: str
    valid: bool
    errors: dict[str, str] = Field(default_factory=dict)
    error_kinds: dict[str, str] = Field(default_factory=dict)
    view: FormView | None = None
    values: dict[str, Any] | None = None


class ConfirmationResponse(BaseModel):
    session_id: str
    entries: list[ConfirmationEntry]
