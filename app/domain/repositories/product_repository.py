"""
Product Repository Interface.
Defines specific data access operations for Products.
"""

from datetime import datetime
from typing import List, Dict, Any, Optional, Tuple

from app.domain.repositories.base import BaseRepository
from app.domain.models.product import Product
from app.domain.schemas.product import ProductFilter


class ProductRepository(BaseRepository[Product]):
    """Interface for Product-specific operations."""

    def get_by_name(self, name: str, exclude_id: Optional[str] = None) -> Optional[Product]:
        """Case-insensitive lookup by name."""
        ...

    def get_by_barcode(self, barcode: str, exclude_id: Optional[str] = None) -> Optional[Product]:
        ...

    def get_with_filters(self, filters: ProductFilter) -> Tuple[List[Product], int]:
        """Get one page of products matching the filters plus the total match count."""
        ...

    def get_low_stock(self) -> List[Product]:
        """Products with quantity <= threshold, lowest quantity first."""
        ...

    def get_all(self) -> List[Product]:
        ...

    def get_recent(self, limit: int = 5) -> List[Product]:
        ...

    def delete_many(self, ids: List[str]) -> List[str]:
        """Delete the given ids and return those that existed."""
        ...

    def get_overall_stats(self) -> Dict[str, Any]:
        ...

    def count_low_stock(self) -> int:
        ...

    def count_out_of_stock(self) -> int:
        ...

    def get_total_value(self) -> float:
        ...

    def get_category_counts(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Product count and quantity per category, largest first."""
        ...

    def get_inventory_valuation(
        self, category: Optional[str] = None, sort_by: str = "value", order: str = "desc"
    ) -> List[Dict[str, Any]]:
        ...

    def get_stock_movement(self, since: datetime) -> List[Product]:
        """Products restocked or sold at or after ``since``."""
        ...

    def get_group_performance(self, group_by: str) -> List[Dict[str, Any]]:
        """Totals and low/out-of-stock counts per category or supplier."""
        ...
