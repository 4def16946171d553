"""Analytics API — dashboard, valuation, movement, group reports and exports."""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from app.interfaces.api.deps import get_current_user
from app.interfaces.deps import get_product_repository
from app.domain.repositories.product_repository import ProductRepository
from app.domain.schemas.product import SortOrder
from app.application.services import analytics_service, export_service

router = APIRouter(
    prefix="/api/analytics",
    tags=["Analytics"],
    dependencies=[Depends(get_current_user)],
)

ValuationSort = Literal["name", "category", "quantity", "price", "value", "stock_status"]
ExportType = Literal["all", "inventory", "low-stock", "categories"]


@router.get("/dashboard")
def dashboard(repo: ProductRepository = Depends(get_product_repository)):
    return analytics_service.get_dashboard(repo)


@router.get("/inventory-value")
def inventory_value(
    category: Optional[str] = None,
    sort_by: ValuationSort = Query("value", alias="sortBy"),
    order: SortOrder = "desc",
    repo: ProductRepository = Depends(get_product_repository),
):
    return analytics_service.get_inventory_value(repo, category or None, sort_by, order)


@router.get("/stock-movement")
def stock_movement(
    days: int = Query(30, ge=1, le=365),
    repo: ProductRepository = Depends(get_product_repository),
):
    return analytics_service.get_stock_movement(repo, days)


@router.get("/category-performance")
def category_performance(repo: ProductRepository = Depends(get_product_repository)):
    return analytics_service.get_category_performance(repo)


@router.get("/supplier-analysis")
def supplier_analysis(repo: ProductRepository = Depends(get_product_repository)):
    return analytics_service.get_supplier_analysis(repo)


@router.get("/export")
def export_report(
    type: ExportType = "all",
    format: Literal["json", "csv"] = "json",
    repo: ProductRepository = Depends(get_product_repository),
):
    """Export a report as JSON, or as a CSV attachment stamped with today's date."""
    data, stem = export_service.build_export_data(repo, type)

    if format == "csv":
        return Response(
            content=export_service.render_csv(data),
            media_type="text/csv",
            headers={
                "Content-Disposition": f'attachment; filename="{export_service.export_filename(stem)}"'
            },
        )

    return export_service.render_json(type, data)
