"""Analytics service — read-only inventory reports built from SQL aggregations."""

from datetime import timedelta
from typing import Any, Dict, List

from app.domain.models.product import utcnow
from app.domain.repositories.product_repository import ProductRepository
from app.domain.schemas.product import ProductRead


def stock_health(total_products: int, low_stock_count: int) -> float:
    """Share of a group's products that are not low on stock, in percent."""
    if total_products <= 0:
        return 0.0
    return round(100 * (total_products - low_stock_count) / total_products, 2)


def get_dashboard(repo: ProductRepository) -> Dict[str, Any]:
    """Get dashboard overview: totals, category breakdowns and latest products."""
    return {
        "overview": {
            "total_products": repo.get_overall_stats()["total_products"],
            "low_stock_count": repo.count_low_stock(),
            "out_of_stock_count": repo.count_out_of_stock(),
            "total_value": repo.get_total_value(),
        },
        "category_stats": repo.get_category_counts(limit=5),
        "recent_products": [ProductRead.model_validate(p) for p in repo.get_recent(limit=5)],
        "top_categories": [
            {"category": c["category"], "count": c["count"]}
            for c in repo.get_category_counts(limit=10)
        ],
    }


def get_inventory_value(
    repo: ProductRepository, category: str | None = None, sort_by: str = "value", order: str = "desc"
) -> Dict[str, Any]:
    items = repo.get_inventory_valuation(category=category, sort_by=sort_by, order=order)
    return {
        "total_value": sum(item["value"] for item in items),
        "items": items,
        "count": len(items),
    }


def get_stock_movement(repo: ProductRepository, days: int = 30) -> Dict[str, Any]:
    """Products restocked or sold within the last ``days`` days."""
    since = utcnow() - timedelta(days=days)
    items = [
        {
            "id": p.id,
            "name": p.name,
            "category": p.category,
            "quantity": p.quantity,
            "last_restocked": p.last_restocked,
            "last_sold": p.last_sold,
            "days_since_restock": p.days_since_restock,
        }
        for p in repo.get_stock_movement(since)
    ]
    return {"period": f"{days} days", "total_items": len(items), "items": items}


def _with_health(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    for row in rows:
        row["avg_price"] = round(row["avg_price"], 2)
        row["stock_health"] = stock_health(row["total_products"], row["low_stock_count"])
    return rows


def get_category_performance(repo: ProductRepository) -> Dict[str, Any]:
    categories = _with_health(repo.get_group_performance("category"))
    return {
        "categories": categories,
        "summary": {
            "total_categories": len(categories),
            "total_products": sum(c["total_products"] for c in categories),
            "total_value": sum(c["total_value"] for c in categories),
        },
    }


def get_supplier_analysis(repo: ProductRepository) -> Dict[str, Any]:
    suppliers = _with_health(repo.get_group_performance("supplier"))
    for supplier in suppliers:
        supplier["avg_value_per_product"] = round(
            supplier["total_value"] / supplier["total_products"], 2
        )
    return {
        "suppliers": suppliers,
        "summary": {
            "total_suppliers": len(suppliers),
            "total_products": sum(s["total_products"] for s in suppliers),
            "total_value": sum(s["total_value"] for s in suppliers),
        },
    }
