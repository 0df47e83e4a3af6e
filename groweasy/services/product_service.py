from typing import List, Optional, Tuple
import logging
import uuid

from sqlalchemy import select, func, or_, cast, String
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from groweasy.core.exceptions import ConflictError, NotFoundError
from groweasy.models.product import Product, ProductStatus
from groweasy.schemas.product import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "created_at": Product.created_at,
    "name": Product.name,
    "price": Product.price,
    "affiliate_percentage": Product.affiliate_percentage,
}


class ProductService:
    """Service for the product catalog (storefront and admin)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _search_clause(search: str):
        pattern = f"%{search}%"
        return or_(
            Product.name.ilike(pattern),
            Product.description.ilike(pattern),
            cast(Product.tags, String).ilike(pattern),
        )

    async def _paginate(self, stmt, order_by, page: int, limit: int) -> Tuple[List[Product], int]:
        total = (await self.db.execute(
            select(func.count()).select_from(stmt.subquery())
        )).scalar() or 0
        result = await self.db.execute(
            stmt.order_by(order_by).offset((page - 1) * limit).limit(limit)
        )
        return list(result.scalars().all()), total

    # ==================== STOREFRONT ====================

    async def get_products(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        featured: Optional[bool] = None,
        seller_id: Optional[uuid.UUID] = None,
        sort: str = "created_at",
        order: str = "desc",
        page: int = 1,
        limit: int = 12,
    ) -> Tuple[List[Product], int]:
        """Active products only, filtered and sorted for the storefront."""
        stmt = select(Product).where(Product.status == ProductStatus.ACTIVE.value)

        if category:
            stmt = stmt.where(Product.category == category)
        if search:
            stmt = stmt.where(self._search_clause(search))
        if featured is not None:
            stmt = stmt.where(Product.featured == featured)
        if seller_id:
            stmt = stmt.where(Product.seller_id == seller_id)

        column = SORT_FIELDS.get(sort, Product.created_at)
        order_by = column.asc() if order == "asc" else column.desc()
        return await self._paginate(stmt, order_by, page, limit)

    async def get_product(self, product_id: uuid.UUID) -> Product:
        product = (await self.db.execute(
            select(Product).where(Product.id == product_id)
        )).scalar_one_or_none()
        if not product:
            raise NotFoundError("Product not found")
        return product

    async def get_categories(self) -> List[Tuple[str, int]]:
        """Distinct categories of active products, most populated first."""
        count = func.count(Product.id).label("count")
        result = await self.db.execute(
            select(Product.category, count)
            .where(Product.status == ProductStatus.ACTIVE.value)
            .group_by(Product.category)
            .order_by(count.desc(), Product.category)
        )
        return [(name, total) for name, total in result.all()]

    # ==================== ADMIN ====================

    async def admin_list(
        self,
        status: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Product], int]:
        stmt = select(Product)
        if status:
            stmt = stmt.where(Product.status == status)
        if category:
            stmt = stmt.where(Product.category == category)
        if search:
            stmt = stmt.where(or_(self._search_clause(search), Product.sku.ilike(f"%{search}%")))
        return await self._paginate(stmt, Product.created_at.desc(), page, limit)

    async def _sku_taken(self, sku: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        stmt = select(Product.id).where(Product.sku == sku)
        if exclude_id:
            stmt = stmt.where(Product.id != exclude_id)
        return (await self.db.execute(stmt)).scalar_one_or_none() is not None

    async def create_product(
        self,
        data: ProductCreate,
        seller_id: Optional[uuid.UUID] = None,
        status: ProductStatus = ProductStatus.ACTIVE,
    ) -> Product:
        if await self._sku_taken(data.sku):
            raise ConflictError("Product with this SKU already exists")

        product = Product(**data.model_dump(), seller_id=seller_id, status=status.value)
        self.db.add(product)
        try:
            await self.db.flush()
        except IntegrityError as e:
            raise ConflictError("Product with this SKU already exists") from e

        logger.info(f"Product {product.sku} created (status={product.status})")
        return product

    async def update_product(self, product_id: uuid.UUID, data: ProductUpdate) -> Product:
        product = await self.get_product(product_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("status") is not None:
            changes["status"] = changes["status"].value

        for key, value in changes.items():
            setattr(product, key, value)

        await self.db.flush()
        return product

    async def delete_product(self, product_id: uuid.UUID) -> Product:
        product = await self.get_product(product_id)
        await self.db.delete(product)
        await self.db.flush()
        logger.info(f"Product {product.sku} deleted")
        return product
