"""
Custom exceptions for the form engine.

User-input problems are FieldValidationError subclasses: the engine collects
them into an error map and never lets them escape. Everything else signals a
broken catalog, a misbehaving client or a storage failure.
"""


class ConfigurationError(ValueError):
    """Raised when the field catalog is structurally invalid."""
    pass


class FieldValidationError(ValueError):
    """A single field failed one of its declared validation rules."""

    kind = "invalid"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class RequiredError(FieldValidationError):
    kind = "required"


class MinLengthError(FieldValidationError):
    kind = "minLength"


class FormatError(FieldValidationError):
    kind = "format"


class PatternError(FieldValidationError):
    kind = "pattern"


class FormEngineError(ValueError):
    """Raised when a client drives the engine in a way the catalog does not allow."""
    pass


class UnknownFieldError(FormEngineError):
    """Raised for a field or dynamic list key that is not in the catalog."""
    pass


class HiddenFieldError(FormEngineError):
    """Raised when editing a field that is currently hidden."""
    pass


class InvalidValueError(FormEngineError):
    """Raised when a value has the wrong type or is not one of the field's options."""
    pass


class FormClosedError(FormEngineError):
    """Raised when editing or resubmitting a form that was already submitted."""
    pass


class SessionNotFoundError(LookupError):
    """Raised when no mounted form exists for a session id."""
    pass


class HandoffStoreError(RuntimeError):
    """Raised when the hand-off store cannot be written or read."""
    pass
