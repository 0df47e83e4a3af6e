from groweasy.models.user import User, UserRole, UserStatus
from groweasy.models.product import Product, ProductStatus
from groweasy.models.order import Order, OrderItem, OrderStatus, PaymentStatus
from groweasy.models.affiliate import AffiliateLink
from groweasy.models.coupon import Coupon, CouponUsage, DiscountType
from groweasy.models.wallet import Wallet, WalletTransaction, TransactionType, TransactionStatus
from groweasy.models.payout import Payout, PayoutStatus, PayoutRequester
from groweasy.models.enquiry import ProductEnquiry, EnquiryStatus
from groweasy.models.shop import SellerShop
from groweasy.models.notification import Notification, NotificationType
from groweasy.models.audit_log import AuditLog
from groweasy.models.support import (
    ContactMessage,
    Feedback,
    NewsletterSubscriber,
    SupportTicket,
    TicketStatus,
    TicketPriority,
)
from groweasy.models.setting import PlatformSetting

__all__ = [
    "User", "UserRole", "UserStatus",
    "Product", "ProductStatus",
    "Order", "OrderItem", "OrderStatus", "PaymentStatus",
    "AffiliateLink",
    "Coupon", "CouponUsage", "DiscountType",
    "Wallet", "WalletTransaction", "TransactionType", "TransactionStatus",
    "Payout", "PayoutStatus", "PayoutRequester",
    "ProductEnquiry", "EnquiryStatus",
    "SellerShop",
    "Notification", "NotificationType",
    "AuditLog",
    "ContactMessage", "Feedback", "NewsletterSubscriber", "SupportTicket",
    "TicketStatus", "TicketPriority",
    "PlatformSetting",
]
