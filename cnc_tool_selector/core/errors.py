"""Exception taxonomy for the calculation engine."""
from __future__ import annotations

from typing import Optional


class ParameterValidationError(ValueError):
    """Raised before computation when one or more inputs are invalid.

    Carries every violated constraint, not just the first, so a caller can
    flag all offending fields in one pass.
    """

    def __init__(self, errors: list, validation: Optional[object] = None):
        self.errors = list(errors)
        self.validation = validation
        super().__init__("; ".join("%s: %s" % (f, m) for f, m in self.errors))

    @property
    def fields(self) -> list:
        return [f for f, _ in self.errors]

    @property
    def messages(self) -> list:
        return [m for _, m in self.errors]


class ComputationError(ValueError):
    """Raised when inputs pass validation but leave a formula's domain."""

    def __init__(self, message: str, field: str = ""):
        self.field = field
        super().__init__(message)


class ToolNotFoundError(KeyError):
    """Raised when a comparison entry id does not exist."""

    def __init__(self, tool_id):
        self.tool_id = tool_id
        super().__init__(tool_id)

    def __str__(self) -> str:
        return "Tool %s not found in comparison" % self.tool_id


class CatalogueFormatError(ValueError):
    """Raised when a catalogue file cannot be read."""
