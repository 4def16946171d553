"""
SQLAlchemy Implementation of Product Repository.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import case, func, or_

from app.domain.models.product import Product, name_key
from app.domain.repositories.product_repository import ProductRepository
from app.infrastructure.repositories.base_repository import SQLAlchemyRepository
from app.domain.schemas.product import ProductFilter

STOCK_VALUE = Product.stock_value

VALUATION_SORT_COLUMNS = {
    "name": Product.name,
    "category": Product.category,
    "quantity": Product.quantity,
    "price": Product.price,
    "value": STOCK_VALUE,
    "stock_status": Product.stock_status,
}


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _ordered(column, order: str):
    return column.asc() if order == "asc" else column.desc()


class SQLAlchemyProductRepository(SQLAlchemyRepository[Product], ProductRepository):
    """Product repository implementation using SQLAlchemy."""

    def get_by_name(self, name: str, exclude_id: Optional[str] = None) -> Optional[Product]:
        query = self.db.query(Product).filter(Product.name_key == name_key(name))
        if exclude_id:
            query = query.filter(Product.id != exclude_id)
        return query.first()

    def get_by_barcode(self, barcode: str, exclude_id: Optional[str] = None) -> Optional[Product]:
        query = self.db.query(Product).filter(Product.barcode == barcode)
        if exclude_id:
            query = query.filter(Product.id != exclude_id)
        return query.first()

    def get_with_filters(self, filters: ProductFilter) -> Tuple[List[Product], int]:
        """Get products with filtering, sorting and pagination."""
        query = self.db.query(Product)

        if filters.search:
            query = query.filter(Product.name.ilike(f"%{_escape_like(filters.search)}%", escape="\\"))
        if filters.category:
            query = query.filter(Product.category == filters.category)
        if filters.low_stock:
            query = query.filter(Product.is_low_stock)

        total = query.count()
        offset = (filters.page - 1) * filters.limit
        products = (
            query.order_by(_ordered(getattr(Product, filters.sort), filters.order), Product.id)
            .offset(offset)
            .limit(filters.limit)
            .all()
        )
        return products, total

    def get_low_stock(self) -> List[Product]:
        return (
            self.db.query(Product)
            .filter(Product.is_low_stock)
            .order_by(Product.quantity.asc(), Product.name)
            .all()
        )

    def get_all(self) -> List[Product]:
        return self.db.query(Product).order_by(Product.created_at.desc(), Product.id).all()

    def get_recent(self, limit: int = 5) -> List[Product]:
        return (
            self.db.query(Product)
            .order_by(Product.created_at.desc(), Product.id)
            .limit(limit)
            .all()
        )

    def delete_many(self, ids: List[str]) -> List[str]:
        existing = [
            row[0] for row in self.db.query(Product.id).filter(Product.id.in_(ids)).all()
        ]
        if existing:
            self.db.query(Product).filter(Product.id.in_(existing)).delete(synchronize_session=False)
            self.commit()
        return existing

    def get_overall_stats(self) -> Dict[str, Any]:
        row = self.db.query(
            func.count(Product.id).label("total_products"),
            func.coalesce(func.sum(Product.quantity), 0).label("total_quantity"),
            func.coalesce(func.sum(STOCK_VALUE), 0).label("total_value"),
            func.coalesce(func.avg(Product.quantity), 0).label("avg_quantity"),
            func.coalesce(func.min(Product.quantity), 0).label("min_quantity"),
            func.coalesce(func.max(Product.quantity), 0).label("max_quantity"),
        ).one()
        return {
            "total_products": row.total_products,
            "total_quantity": int(row.total_quantity),
            "total_value": float(row.total_value),
            "avg_quantity": round(float(row.avg_quantity), 2),
            "min_quantity": int(row.min_quantity),
            "max_quantity": int(row.max_quantity),
        }

    def count_low_stock(self) -> int:
        return self.db.query(func.count(Product.id)).filter(Product.is_low_stock).scalar() or 0

    def count_out_of_stock(self) -> int:
        return self.db.query(func.count(Product.id)).filter(Product.quantity == 0).scalar() or 0

    def get_total_value(self) -> float:
        return float(self.db.query(func.coalesce(func.sum(STOCK_VALUE), 0)).scalar())

    def get_category_counts(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        count = func.count(Product.id)
        query = (
            self.db.query(
                Product.category,
                count.label("count"),
                func.coalesce(func.sum(Product.quantity), 0).label("total_quantity"),
            )
            .group_by(Product.category)
            .order_by(count.desc(), Product.category)
        )
        if limit:
            query = query.limit(limit)
        return [
            {"category": r.category, "count": r.count, "total_quantity": int(r.total_quantity)}
            for r in query.all()
        ]

    def get_inventory_valuation(
        self, category: Optional[str] = None, sort_by: str = "value", order: str = "desc"
    ) -> List[Dict[str, Any]]:
        query = self.db.query(
            Product.id,
            Product.name,
            Product.category,
            Product.quantity,
            Product.price,
            STOCK_VALUE.label("value"),
            Product.stock_status.label("stock_status"),
        )
        if category:
            query = query.filter(Product.category == category)

        sort_column = VALUATION_SORT_COLUMNS[sort_by]
        rows = query.order_by(_ordered(sort_column, order), Product.name).all()
        return [
            {
                "id": r.id,
                "name": r.name,
                "category": r.category,
                "quantity": r.quantity,
                "price": r.price,
                "value": float(r.value),
                "stock_status": r.stock_status,
            }
            for r in rows
        ]

    def get_stock_movement(self, since: datetime) -> List[Product]:
        return (
            self.db.query(Product)
            .filter(or_(Product.last_restocked >= since, Product.last_sold >= since))
            .order_by(Product.last_restocked.desc().nullslast(), Product.name)
            .all()
        )

    def get_group_performance(self, group_by: str) -> List[Dict[str, Any]]:
        """Totals per category or supplier; suppliers skip blank values."""
        column = getattr(Product, group_by)
        total_value = func.coalesce(func.sum(STOCK_VALUE), 0)
        query = self.db.query(
            column.label("group_key"),
            func.count(Product.id).label("total_products"),
            func.coalesce(func.sum(Product.quantity), 0).label("total_quantity"),
            total_value.label("total_value"),
            func.coalesce(func.avg(Product.price), 0).label("avg_price"),
            func.sum(case((Product.is_low_stock, 1), else_=0)).label("low_stock_count"),
            func.sum(case((Product.quantity == 0, 1), else_=0)).label("out_of_stock_count"),
        )
        if group_by == "supplier":
            query = query.filter(column.isnot(None), column != "")

        rows = query.group_by(column).order_by(total_value.desc(), column).all()
        return [
            {
                group_by: r.group_key,
                "total_products": r.total_products,
                "total_quantity": int(r.total_quantity),
                "total_value": float(r.total_value),
                "avg_price": float(r.avg_price),
                "low_stock_count": int(r.low_stock_count or 0),
                "out_of_stock_count": int(r.out_of_stock_count or 0),
            }
            for r in rows
        ]
