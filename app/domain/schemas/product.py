"""Pydantic schemas for Product domain."""

from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from app.domain.models.product import ProductStatus, StockStatus, Unit

SortField = Literal["created_at", "updated_at", "name", "quantity", "threshold", "category", "price"]
SortOrder = Literal["asc", "desc"]


def check_tags(tags: Optional[List[str]]) -> List[str]:
    """Trim, drop blanks and de-duplicate tags, keeping first-seen order."""
    cleaned: List[str] = []
    for tag in tags or []:
        tag = tag.strip()
        if len(tag) > 30:
            raise ValueError("tags must be at most 30 characters")
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


def blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class ProductBase(BaseModel):
    description: Optional[str] = Field(None, max_length=500)
    unit: Unit = Unit.PIECES
    status: ProductStatus = ProductStatus.ACTIVE
    location: Optional[str] = Field(None, max_length=100)
    supplier: Optional[str] = Field(None, max_length=100)
    barcode: Optional[str] = Field(None, max_length=64)
    tags: List[str] = Field(default_factory=list)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, tags):
        return check_tags(tags)

    @field_validator("barcode", "supplier", "location")
    @classmethod
    def empty_is_missing(cls, value):
        return blank_to_none(value)


class ProductCreate(ProductBase):
    name: str = Field(..., min_length=2, max_length=100)
    quantity: int = Field(..., ge=0)
    threshold: int = Field(5, ge=0)
    category: str = Field("General", min_length=2, max_length=50)
    price: float = Field(0, ge=0)

    @field_validator("name", "category", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value


class ProductUpdate(BaseModel):
    """Partial update: only fields present in the body are applied."""
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    quantity: Optional[int] = Field(None, ge=0)
    threshold: Optional[int] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=2, max_length=50)
    price: Optional[float] = Field(None, ge=0)
    unit: Optional[Unit] = None
    status: Optional[ProductStatus] = None
    location: Optional[str] = Field(None, max_length=100)
    supplier: Optional[str] = Field(None, max_length=100)
    barcode: Optional[str] = Field(None, max_length=64)
    tags: Optional[List[str]] = None

    @field_validator("name", "category", mode="before")
    @classmethod
    def not_blank(cls, value, info):
        if isinstance(value, str):
            if not value.strip():
                raise ValueError(f"{info.field_name.capitalize()} cannot be empty")
            return value.strip()
        if value is None:
            raise ValueError(f"{info.field_name.capitalize()} cannot be empty")
        return value

    @field_validator("quantity", "threshold", "price", "unit", "status")
    @classmethod
    def not_null(cls, value, info):
        # Explicit nulls would otherwise clear non-nullable columns
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, tags):
        return check_tags(tags)

    @field_validator("barcode", "supplier", "location")
    @classmethod
    def empty_is_missing(cls, value):
        return blank_to_none(value)


class ProductRead(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    quantity: int
    threshold: int
    category: str
    price: float
    unit: str
    status: str
    location: Optional[str] = None
    supplier: Optional[str] = None
    barcode: Optional[str] = None
    tags: List[str] = []
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    last_restocked: Optional[datetime] = None
    last_sold: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Derived
    stock_status: StockStatus
    stock_value: float
    days_since_restock: Optional[int] = None

    model_config = {"from_attributes": True}


class ProductFilter(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    sort: SortField = "created_at"
    order: SortOrder = "desc"
    search: Optional[str] = None
    category: Optional[str] = None
    low_stock: bool = False


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_prev_page: bool


class ProductListResponse(BaseModel):
    products: List[ProductRead]
    pagination: Pagination


class ProductMessage(BaseModel):
    message: str
    product: ProductRead


class ProductDeleted(BaseModel):
    message: str
    deleted_product: ProductRead


class LowStockResponse(BaseModel):
    count: int
    products: List[ProductRead]


class BulkCreateRequest(BaseModel):
    # Items stay raw so each one can fail validation on its own
    products: List[Any] = Field(..., min_length=1)


class BulkItemError(BaseModel):
    index: int
    name: str
    error: str


class BulkCreateResponse(BaseModel):
    message: str
    added: int
    failed: int
    results: List[ProductRead]
    errors: List[BulkItemError]


class BulkDeleteRequest(BaseModel):
    ids: List[str] = Field(..., min_length=1)


class BulkDeleteResponse(BaseModel):
    message: str
    deleted_count: int
    deleted_ids: List[str]
    not_found_ids: List[str]


class OverallStats(BaseModel):
    total_products: int = 0
    total_quantity: int = 0
    total_value: float = 0.0
    avg_quantity: float = 0.0
    min_quantity: int = 0
    max_quantity: int = 0


class CategoryCount(BaseModel):
    category: str
    count: int
    total_quantity: int


class ProductStats(BaseModel):
    overall: OverallStats
    low_stock_count: int
    category_stats: List[CategoryCount]
