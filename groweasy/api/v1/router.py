from fastapi import APIRouter

from groweasy.api.v1.endpoints import (
    # Access Control
    auth,
    # Storefront
    products,
    orders,
    coupons,
    shop,
    # Seller Workspace
    seller,
    # Back Office
    admin,
    enquiries,
    payouts,
    # Forms & Support
    support,
)

api_router = APIRouter(prefix="/api")


# ==================== Authentication ====================
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Authentication"]
)

# ==================== Storefront ====================
api_router.include_router(products.router)
api_router.include_router(orders.router)
api_router.include_router(coupons.router)
api_router.include_router(shop.router)

# ==================== Seller ====================
api_router.include_router(seller.router)

# ==================== Admin ====================
api_router.include_router(admin.router, prefix="/admin")
api_router.include_router(products.admin_router, prefix="/admin")
api_router.include_router(orders.admin_router, prefix="/admin")
api_router.include_router(coupons.admin_router, prefix="/admin")
api_router.include_router(enquiries.admin_router, prefix="/admin")
api_router.include_router(payouts.admin_router, prefix="/admin")

# ==================== Forms & Support ====================
api_router.include_router(support.router)
