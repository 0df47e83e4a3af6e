"""API endpoints for the product catalog: storefront listing and admin CRUD."""
from typing import Optional, Literal
from uuid import UUID

from fastapi import APIRouter, Query, Request, status

from groweasy.api.deps import DB, AdminUser, record_admin_action
from groweasy.schemas.base import MessageResponse, page_info
from groweasy.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
    CategoryCount,
    CategoryListResponse,
)
from groweasy.services.product_service import ProductService

router = APIRouter(tags=["Products"])
admin_router = APIRouter(tags=["Admin Products"])


# ==================== Storefront ====================

@router.get("/products", response_model=ProductListResponse)
async def list_products(
    db: DB,
    category: Optional[str] = None,
    search: Optional[str] = None,
    featured: Optional[bool] = None,
    seller_id: Optional[UUID] = None,
    sort: Literal["created_at", "name", "price", "affiliate_percentage"] = "created_at",
    order: Literal["asc", "desc"] = "desc",
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
):
    """List active products with filters, sorting and pagination."""
    products, total = await ProductService(db).get_products(
        category=category,
        search=search,
        featured=featured,
        seller_id=seller_id,
        sort=sort,
        order=order,
        page=page,
        limit=limit,
    )
    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in products],
        pagination=page_info(page, limit, total),
    )


@router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(product_id: UUID, db: DB):
    return await ProductService(db).get_product(product_id)


@router.get("/categories", response_model=CategoryListResponse)
async def list_categories(db: DB):
    """Categories of active products with product counts, largest first."""
    categories = await ProductService(db).get_categories()
    return CategoryListResponse(
        categories=[CategoryCount(name=name, count=count) for name, count in categories]
    )


# ==================== Admin ====================

@admin_router.get("/products", response_model=ProductListResponse)
async def admin_list_products(
    db: DB,
    admin: AdminUser,
    status: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    products, total = await ProductService(db).admin_list(
        status=status, category=category, search=search, page=page, limit=limit
    )
    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in products],
        pagination=page_info(page, limit, total),
    )


@admin_router.post("/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def admin_create_product(data: ProductCreate, request: Request, db: DB, admin: AdminUser):
    product = await ProductService(db).create_product(data)
    await record_admin_action(
        db, request, admin, "CREATE_PRODUCT", "product", product.id,
        {"sku": product.sku, "name": product.name},
    )
    return product


@admin_router.put("/products/{product_id}", response_model=ProductResponse)
async def admin_update_product(
    product_id: UUID,
    data: ProductUpdate,
    request: Request,
    db: DB,
    admin: AdminUser,
):
    product = await ProductService(db).update_product(product_id, data)
    await record_admin_action(
        db, request, admin, "UPDATE_PRODUCT", "product", product.id,
        {"fields": sorted(data.model_dump(exclude_unset=True))},
    )
    return product


@admin_router.delete("/products/{product_id}", response_model=MessageResponse)
async def admin_delete_product(product_id: UUID, request: Request, db: DB, admin: AdminUser):
    product = await ProductService(db).delete_product(product_id)
    await record_admin_action(db, request, admin, "DELETE_PRODUCT", "product", product_id, {"sku": product.sku})
    return MessageResponse(message="Product deleted successfully")
