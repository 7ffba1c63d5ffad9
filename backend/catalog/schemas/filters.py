"""
Read-side filter parsing.

Filter models forbid unknown keys so a misspelled filter is reported
instead of silently widening the result.
"""

from typing import Any, Dict, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from catalog.core.exceptions import CatalogValidationError

F = TypeVar("F", bound="StrictFilters")


class StrictFilters(BaseModel):
    model_config = ConfigDict(extra="forbid")


def parse_filters(model: Type[F], filters: Union[F, Dict[str, Any], None]) -> F:
    """Build ``model`` from a plain dict, mapping pydantic errors to CatalogValidationError."""
    if isinstance(filters, model):
        return filters
    try:
        return model(**(filters or {}))
    except ValidationError as e:
        error = e.errors()[0]
        field: Optional[str] = str(error["loc"][0]) if error.get("loc") else None
        if error.get("type") == "extra_forbidden":
            raise CatalogValidationError(f"Unknown filter '{field}'", field=field) from e
        raise CatalogValidationError(f"Invalid filter '{field}': {error['msg']}", field=field) from e
