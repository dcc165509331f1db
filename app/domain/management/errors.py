"""
Domain-specific errors for the management bounded context.

All errors raised from the domain and application layers must be defined
here. These are mapped to HTTP responses at the interface layer.
No framework imports allowed.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from app.domain.management.entities import EntityKind


@dataclass(frozen=True)
class FieldError:
    """A single failed validation rule for a single field."""

    field: str
    code: str
    message: str


class ManagementDomainError(Exception):
    """Base error for all management domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class EntityNotFoundError(ManagementDomainError):
    """Raised when a user, project or task id does not resolve.

    ``entity_id`` may be a single id or a list of missing ids.
    """

    def __init__(self, entity_kind: EntityKind, entity_id: object) -> None:
        super().__init__(f"{entity_kind.value} not found with ID: {entity_id}")
        self.entity_kind = entity_kind
        self.entity_id = entity_id


class ValidationFailedError(ManagementDomainError):
    """Raised when one or more field rules fail. Carries every failure."""

    def __init__(self, field_errors: Iterable[FieldError]) -> None:
        self.field_errors = list(field_errors)
        fields = ", ".join(error.field for error in self.field_errors)
        super().__init__(f"Validation failed for fields: {fields}")


class MalformedRequestError(ManagementDomainError):
    """Raised when a request body cannot be interpreted at all."""

    def __init__(self, reason: str = "Malformed request body") -> None:
        super().__init__(reason)
        self.reason = reason


class ReferentialConflictError(ManagementDomainError):
    """Raised when a delete is blocked because other records reference the entity."""

    def __init__(
        self, entity_kind: EntityKind, entity_id: int, reason: str
    ) -> None:
        super().__init__(
            f"Cannot delete {entity_kind.value} {entity_id}: {reason}"
        )
        self.entity_kind = entity_kind
        self.entity_id = entity_id
        self.reason = reason


class DuplicateResourceError(ManagementDomainError):
    """Raised when a unique field value is already taken."""

    def __init__(self, entity_kind: EntityKind, field: str, value: str) -> None:
        super().__init__(f"{entity_kind.value} {field} already exists: {value}")
        self.entity_kind = entity_kind
        self.field = field
        self.value = value


class BusinessRuleError(ManagementDomainError):
    """Raised when a request is well-formed but violates a business rule."""

    def __init__(self, reason: str, entity_id: Optional[int] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.entity_id = entity_id
