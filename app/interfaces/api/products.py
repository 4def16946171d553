"""Products API routes — list, search, stats, CRUD and bulk operations."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.interfaces.api.deps import get_current_user
from app.interfaces.deps import get_product_repository
from app.domain.repositories.product_repository import ProductRepository
from app.domain.models.user import User
from app.domain.schemas.product import (
    BulkCreateRequest,
    BulkCreateResponse,
    BulkDeleteRequest,
    BulkDeleteResponse,
    LowStockResponse,
    ProductCreate,
    ProductDeleted,
    ProductFilter,
    ProductListResponse,
    ProductMessage,
    ProductRead,
    ProductStats,
    ProductUpdate,
    SortField,
    SortOrder,
)
from app.application.services import product_service

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("", response_model=ProductListResponse)
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort: SortField = "created_at",
    order: SortOrder = "desc",
    search: Optional[str] = None,
    category: Optional[str] = None,
    low_stock: bool = Query(False, alias="lowStock"),
    repo: ProductRepository = Depends(get_product_repository),
):
    filters = ProductFilter(
        page=page,
        limit=limit,
        sort=sort,
        order=order,
        search=search or None,
        category=category or None,
        low_stock=low_stock,
    )
    return product_service.list_products(repo, filters)


@router.get("/stats", response_model=ProductStats)
def product_stats(repo: ProductRepository = Depends(get_product_repository)):
    return product_service.get_product_stats(repo)


@router.get("/low-stock", response_model=LowStockResponse)
def low_stock_products(repo: ProductRepository = Depends(get_product_repository)):
    """Products at or below their threshold, lowest quantity first."""
    return product_service.get_low_stock_products(repo)


@router.post("", response_model=ProductMessage, status_code=status.HTTP_201_CREATED)
def create_product(
    body: ProductCreate,
    repo: ProductRepository = Depends(get_product_repository),
    user: User = Depends(get_current_user),
):
    product = product_service.create_product(repo, body, user)
    return {"message": "Product added successfully", "product": product}


@router.post("/bulk", response_model=BulkCreateResponse, status_code=status.HTTP_201_CREATED)
def bulk_create_products(
    body: BulkCreateRequest,
    repo: ProductRepository = Depends(get_product_repository),
    user: User = Depends(get_current_user),
):
    """Create many products; each item succeeds or fails on its own."""
    return product_service.bulk_create_products(repo, body.products, user)


@router.delete("/bulk", response_model=BulkDeleteResponse)
def bulk_delete_products(
    body: BulkDeleteRequest,
    repo: ProductRepository = Depends(get_product_repository),
    user: User = Depends(get_current_user),
):
    return product_service.bulk_delete_products(repo, body.ids, user)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(product_id: str, repo: ProductRepository = Depends(get_product_repository)):
    return product_service.get_product(repo, product_id)


@router.put("/{product_id}", response_model=ProductMessage)
def update_product(
    product_id: str,
    body: ProductUpdate,
    repo: ProductRepository = Depends(get_product_repository),
    user: User = Depends(get_current_user),
):
    """Partial update: only the fields sent are changed."""
    product = product_service.update_product(repo, product_id, body, user)
    return {"message": "Product updated successfully", "product": product}


@router.delete("/{product_id}", response_model=ProductDeleted)
def delete_product(
    product_id: str,
    repo: ProductRepository = Depends(get_product_repository),
    user: User = Depends(get_current_user),
):
    deleted = product_service.delete_product(repo, product_id, user)
    return {"message": "Product deleted successfully", "deleted_product": deleted}
