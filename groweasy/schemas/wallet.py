"""Pydantic schemas for seller wallets and payouts."""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, Field

from groweasy.schemas.base import BaseResponseSchema, MoneyValue, Pagination
from groweasy.schemas.user import BankDetails, UserBrief


# ==================== Wallet Schemas ====================

class WalletTransactionResponse(BaseResponseSchema):
    id: UUID
    type: str
    amount: MoneyValue
    description: str
    status: str
    order_id: Optional[UUID] = None
    affiliate_link_id: Optional[UUID] = None
    payout_id: Optional[UUID] = None
    created_at: datetime


class WalletResponse(BaseResponseSchema):
    id: UUID
    seller_id: UUID
    balance: MoneyValue
    total_earnings: MoneyValue
    total_withdrawn: MoneyValue
    pending_earnings: MoneyValue = Decimal("0")
    last_payout_date: Optional[datetime] = None
    transactions: List[WalletTransactionResponse] = []


class SellerWalletResponse(BaseModel):
    wallet: WalletResponse
    bank_details: Optional[dict] = None
    minimum_payout_amount: float


class BankDetailsUpdate(BaseModel):
    bank_details: BankDetails


# ==================== Payout Schemas ====================

class PayoutCreate(BaseModel):
    amount: Decimal = Field(..., gt=0, description="Amount to withdraw in INR")


class PayoutResponse(BaseResponseSchema):
    id: UUID
    seller_id: UUID
    amount: MoneyValue
    status: str
    bank_details: dict
    razorpay_payout_id: Optional[str] = None
    failure_reason: Optional[str] = None
    processed_at: Optional[datetime] = None
    requested_by: str
    seller: Optional[UserBrief] = None
    created_at: datetime


class PayoutListResponse(BaseModel):
    items: List[PayoutResponse]
    pagination: Pagination


class PayoutRejectRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=1000)
