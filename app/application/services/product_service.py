"""Product service — business logic for product CRUD, bulk operations and stats."""

import math
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import AppError, DuplicateEntityException, EntityNotFoundException
from app.domain.models.product import Product, name_key, utcnow
from app.domain.models.user import User
from app.domain.repositories.product_repository import ProductRepository
from app.domain.schemas.product import ProductCreate, ProductFilter, ProductRead, ProductUpdate
from app.domain.validation import ensure_product_id, is_valid_product_id, validate_product_payload

logger = structlog.get_logger(__name__)


def _ensure_unique(
    repo: ProductRepository,
    name: Optional[str] = None,
    barcode: Optional[str] = None,
    exclude_id: Optional[str] = None,
) -> None:
    if name is not None and repo.get_by_name(name, exclude_id=exclude_id):
        raise DuplicateEntityException("A product with this name already exists", {"field": "name"})
    if barcode and repo.get_by_barcode(barcode, exclude_id=exclude_id):
        raise DuplicateEntityException("A product with this barcode already exists", {"field": "barcode"})


def list_products(repo: ProductRepository, filters: ProductFilter) -> Dict[str, Any]:
    """Get one page of products plus pagination metadata."""
    products, total = repo.get_with_filters(filters)
    total_pages = math.ceil(total / filters.limit)
    return {
        "products": products,
        "pagination": {
            "current_page": filters.page,
            "total_pages": total_pages,
            "total_items": total,
            "items_per_page": filters.limit,
            "has_next_page": filters.page < total_pages,
            "has_prev_page": filters.page > 1,
        },
    }


def get_product(repo: ProductRepository, product_id: str) -> Product:
    product = repo.get_by_id(ensure_product_id(product_id))
    if product is None:
        raise EntityNotFoundException("Product not found", {"id": product_id})
    return product


def create_product(repo: ProductRepository, data: ProductCreate, user: User) -> Product:
    _ensure_unique(repo, name=data.name, barcode=data.barcode)

    values = data.model_dump(mode="json")
    values.update(name_key=name_key(data.name), created_by=user.id, updated_by=user.id)
    try:
        product = repo.create(values)
    except IntegrityError:
        # A concurrent writer took the name or barcode between check and insert
        raise DuplicateEntityException("Duplicate field value")

    logger.info("Product created", product_id=product.id, name=product.name, user_id=user.id)
    return product


def bulk_create_products(repo: ProductRepository, items: List[Any], user: User) -> Dict[str, Any]:
    """Create each item independently; failures are collected, never fatal."""
    results: List[Product] = []
    errors: List[Dict[str, Any]] = []

    for index, raw in enumerate(items):
        name = raw.get("name") if isinstance(raw, dict) else None
        label = str(name) if name else "Unknown"

        validation = validate_product_payload(raw)
        if not validation.ok:
            errors.append({"index": index, "name": label, "error": "; ".join(validation.errors)})
            continue

        try:
            results.append(create_product(repo, validation.value, user))
        except AppError as exc:
            errors.append({"index": index, "name": label, "error": exc.message})

    logger.info("Bulk create finished", added=len(results), failed=len(errors), user_id=user.id)
    return {
        "message": f"Successfully added {len(results)} products",
        "added": len(results),
        "failed": len(errors),
        "results": results,
        "errors": errors,
    }


def update_product(repo: ProductRepository, product_id: str, data: ProductUpdate, user: User) -> Product:
    """Apply a partial update, stamping restock/sale times when quantity moves."""
    product = get_product(repo, product_id)
    changes = data.model_dump(mode="json", exclude_unset=True)

    if "name" in changes:
        _ensure_unique(repo, name=changes["name"], exclude_id=product.id)
        changes["name_key"] = name_key(changes["name"])
    if changes.get("barcode"):
        _ensure_unique(repo, barcode=changes["barcode"], exclude_id=product.id)

    now = utcnow()
    if "quantity" in changes:
        if changes["quantity"] > product.quantity:
            changes["last_restocked"] = now
        elif changes["quantity"] < product.quantity:
            changes["last_sold"] = now

    changes.update(updated_by=user.id, updated_at=now)
    try:
        product = repo.update(product, changes)
    except IntegrityError:
        raise DuplicateEntityException("Duplicate field value")

    logger.info("Product updated", product_id=product.id, fields=sorted(data.model_fields_set), user_id=user.id)
    return product


def delete_product(repo: ProductRepository, product_id: str, user: User) -> ProductRead:
    product = get_product(repo, product_id)
    snapshot = ProductRead.model_validate(product)
    repo.delete(product)
    logger.info("Product deleted", product_id=snapshot.id, user_id=user.id)
    return snapshot


def bulk_delete_products(repo: ProductRepository, ids: List[str], user: User) -> Dict[str, Any]:
    """Delete every existing id; unknown or malformed ids are reported, not fatal."""
    normalized = {raw: ensure_product_id(raw) for raw in ids if is_valid_product_id(raw)}
    deleted = set(repo.delete_many(list(set(normalized.values())))) if normalized else set()

    deleted_ids = sorted(deleted)
    not_found = [raw for raw in ids if normalized.get(raw) not in deleted]

    logger.info("Bulk delete finished", deleted=len(deleted_ids), not_found=len(not_found), user_id=user.id)
    return {
        "message": f"Successfully deleted {len(deleted_ids)} products",
        "deleted_count": len(deleted_ids),
        "deleted_ids": deleted_ids,
        "not_found_ids": not_found,
    }


def get_low_stock_products(repo: ProductRepository) -> Dict[str, Any]:
    products = repo.get_low_stock()
    return {"count": len(products), "products": products}


def get_product_stats(repo: ProductRepository) -> Dict[str, Any]:
    return {
        "overall": repo.get_overall_stats(),
        "low_stock_count": repo.count_low_stock(),
        "category_stats": repo.get_category_counts(),
    }
