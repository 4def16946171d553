"""Product domain model — maps to the 'products' table."""

import enum
import math
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    case,
)
from sqlalchemy.ext.hybrid import hybrid_property

from app.infrastructure.database import Base


class Unit(str, enum.Enum):
    PIECES = "pieces"
    KG = "kg"
    LITERS = "liters"
    BOXES = "boxes"
    UNITS = "units"


class ProductStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DISCONTINUED = "discontinued"


class StockStatus(str, enum.Enum):
    OUT_OF_STOCK = "out-of-stock"
    LOW_STOCK = "low-stock"
    IN_STOCK = "in-stock"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_product_id() -> str:
    return str(uuid.uuid4())


def name_key(name: str) -> str:
    """Normalized form used for case-insensitive name uniqueness."""
    return name.strip().lower()


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=new_product_id)

    name = Column(String(100), nullable=False)
    name_key = Column(String(100), nullable=False, unique=True, index=True)
    description = Column(String(500), nullable=True)

    quantity = Column(Integer, nullable=False, default=0)
    threshold = Column(Integer, nullable=False, default=5)
    category = Column(String(50), nullable=False, default="General", index=True)
    price = Column(Float, nullable=False, default=0.0)
    unit = Column(String(20), nullable=False, default=Unit.PIECES.value)
    status = Column(String(20), nullable=False, default=ProductStatus.ACTIVE.value)

    location = Column(String(100), nullable=True)
    supplier = Column(String(100), nullable=True, index=True)
    barcode = Column(String(64), nullable=True, unique=True)
    tags = Column(JSON, nullable=False, default=list)

    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    updated_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    last_restocked = Column(DateTime(timezone=True), nullable=True)
    last_sold = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="check_quantity_non_negative"),
        CheckConstraint("threshold >= 0", name="check_threshold_non_negative"),
        CheckConstraint("price >= 0", name="check_price_non_negative"),
    )

    @hybrid_property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.threshold

    @is_low_stock.expression
    def is_low_stock(cls):
        return cls.quantity <= cls.threshold

    @hybrid_property
    def stock_value(self) -> float:
        return self.quantity * self.price

    @hybrid_property
    def stock_status(self) -> str:
        if self.quantity <= 0:
            return StockStatus.OUT_OF_STOCK.value
        if self.quantity <= self.threshold:
            return StockStatus.LOW_STOCK.value
        return StockStatus.IN_STOCK.value

    @stock_status.expression
    def stock_status(cls):
        return case(
            (cls.quantity <= 0, StockStatus.OUT_OF_STOCK.value),
            (cls.quantity <= cls.threshold, StockStatus.LOW_STOCK.value),
            else_=StockStatus.IN_STOCK.value,
        )

    @property
    def days_since_restock(self) -> int | None:
        return days_since(self.last_restocked)

    def __repr__(self):
        return f"<Product {self.id} - {self.name}>"


def days_since(moment: datetime | None, now: datetime | None = None) -> int | None:
    """Whole days elapsed since ``moment``, rounded up. Naive values are taken as UTC."""
    if moment is None:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    now = now or utcnow()
    return math.ceil((now - moment).total_seconds() / 86400)
