"""
Explicit product validation.

Bulk endpoints receive raw dictionaries and must keep going when one item is
bad, so validation here returns a result instead of raising.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, List, Optional, TypeVar
import uuid

from pydantic import BaseModel, ValidationError

from app.core.exceptions import InvalidIdentifierException, format_validation_errors
from app.domain.schemas.product import ProductCreate

T = TypeVar("T", bound=BaseModel)


@dataclass
class ValidationResult(Generic[T]):
    value: Optional[T] = None
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.value is not None and not self.errors


def _validate(schema: type[T], raw: Any) -> ValidationResult[T]:
    if not isinstance(raw, dict):
        return ValidationResult(errors=["Product must be an object"])
    try:
        return ValidationResult(value=schema.model_validate(raw))
    except ValidationError as exc:
        return ValidationResult(errors=format_validation_errors(exc.errors()))


def validate_product_payload(raw: Any) -> ValidationResult[ProductCreate]:
    """Validate a raw create payload (numeric strings are coerced)."""
    return _validate(ProductCreate, raw)


def is_valid_product_id(product_id: str) -> bool:
    try:
        uuid.UUID(str(product_id))
    except ValueError:
        return False
    return True


def ensure_product_id(product_id: str) -> str:
    """Normalize a product id or raise a 400 for ids that cannot exist."""
    if not is_valid_product_id(product_id):
        raise InvalidIdentifierException(details={"id": product_id})
    return str(uuid.UUID(str(product_id)))
