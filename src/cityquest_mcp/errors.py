"""Errors raised by the CityQuest widget registry."""

from __future__ import annotations

from dataclasses import dataclass


class CityQuestError(Exception):
    """Base class for registry errors."""


@dataclass(frozen=True)
class FieldViolation:
    """A single argument that failed its field constraint."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ValidationError(CityQuestError):
    """Tool arguments do not satisfy the tool's input schema."""

    def __init__(self, tool: str, violations: list[FieldViolation]) -> None:
        self.tool = tool
        self.violations = violations
        details = "; ".join(str(v) for v in violations)
        super().__init__(f"Invalid arguments for {tool}: {details}")

    @property
    def fields(self) -> list[str]:
        return [v.field for v in self.violations]


class NotFoundError(CityQuestError):
    """A tool name, resource URI or prompt name is not registered."""


class BuilderError(CityQuestError):
    """A structured-content builder failed while computing its payload."""


class RegistrationError(CityQuestError):
    """A catalog entry could not be registered at startup."""
