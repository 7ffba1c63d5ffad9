"""
Catalog Exceptions

Typed conditions raised by the catalog core. They carry enough context for
an outer transport layer to map them to its own status codes.
"""

from typing import Optional


class CatalogError(Exception):
    """Base class for all catalog conditions."""


class CatalogValidationError(CatalogError):
    """Caller supplied an invalid value (filter, severity, mode, ...)."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidVersionRangeError(CatalogValidationError):
    def __init__(self, version_range: str, reason: str = "invalid syntax"):
        super().__init__(
            f"Invalid version range '{version_range}': {reason}",
            field="version_range",
        )
        self.version_range = version_range


class InvalidBOMError(CatalogError):
    """The document is not a structurally valid BOM of a supported format."""


class PreconditionError(CatalogError):
    """An ordering step (registration, linking) has not been performed yet."""

    def __init__(self, message: str, repository_url: str):
        super().__init__(message)
        self.repository_url = repository_url


class RepositoryNotRegisteredError(PreconditionError):
    def __init__(self, repository_url: str):
        super().__init__(
            f"Repository not registered: {repository_url}. "
            f"Register it with a system before submitting a BOM.",
            repository_url,
        )


class RepositoryNotLinkedError(PreconditionError):
    def __init__(self, repository_url: str, system_count: int = 0):
        if system_count:
            message = (
                f"Repository {repository_url} is linked to {system_count} systems; "
                f"exactly one is required."
            )
        else:
            message = f"Repository {repository_url} is not linked to any system."
        super().__init__(message, repository_url)
        self.system_count = system_count


class NotFoundError(CatalogError):
    def __init__(self, entity_type: str, name: str):
        super().__init__(f"{entity_type} '{name}' not found")
        self.entity_type = entity_type
        self.name = name


class ConflictError(CatalogError):
    def __init__(self, entity_type: str, name: str):
        super().__init__(f"{entity_type} '{name}' already exists")
        self.entity_type = entity_type
        self.name = name


class IngestionError(CatalogError):
    """The store failed while merging a batch; nothing was committed."""

    def __init__(self, message: str, system_name: Optional[str] = None):
        super().__init__(message)
        self.system_name = system_name
