"""
Payment Service - Razorpay Integration

Handles payment processing for the storefront checkout:
- Create Razorpay orders
- Verify payment signatures
"""

import logging
import hmac
import hashlib
from decimal import Decimal
from typing import Optional, Dict, Any

import razorpay

from groweasy.config import settings
from groweasy.core.exceptions import PaymentGatewayError
from groweasy.core.utils import to_paise

logger = logging.getLogger(__name__)


class PaymentService:
    """
    Service for handling Razorpay payments.
    """

    def __init__(self):
        """Initialize Razorpay client."""
        self.client = razorpay.Client(
            auth=(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET)
        )
        self.key_id = settings.RAZORPAY_KEY_ID
        self.key_secret = settings.RAZORPAY_KEY_SECRET

    def create_order(
        self,
        amount: Decimal,
        receipt: str,
        currency: str = "INR",
        notes: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        Create a Razorpay order for payment.

        Args:
            amount: Order total in rupees
            receipt: Our order number, echoed back by Razorpay
            currency: ISO currency code
            notes: Extra key/value pairs stored on the Razorpay order

        Returns:
            The Razorpay order entity (id, amount in paise, currency, status ...)
        """
        order_data = {
            "amount": to_paise(amount),
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
        }
        try:
            razorpay_order = self.client.order.create(data=order_data)
        except Exception as e:
            logger.error(f"Failed to create Razorpay order for {receipt}: {e}")
            raise PaymentGatewayError("Failed to create payment order") from e

        logger.info(f"Created Razorpay order {razorpay_order['id']} for order {receipt}")
        return razorpay_order

    def verify_signature(
        self,
        razorpay_order_id: str,
        razorpay_payment_id: str,
        razorpay_signature: str,
    ) -> bool:
        """
        Verify the checkout signature Razorpay hands to the browser.

        The signature is HMAC-SHA256 of "<order_id>|<payment_id>" keyed with
        the account secret.
        """
        payload = f"{razorpay_order_id}|{razorpay_payment_id}"
        expected_signature = hmac.new(
            self.key_secret.encode(),
            payload.encode(),
            hashlib.sha256
        ).hexdigest()

        valid = hmac.compare_digest(expected_signature, razorpay_signature)
        if not valid:
            logger.warning(f"Invalid payment signature for Razorpay order {razorpay_order_id}")
        return valid


def get_payment_service() -> PaymentService:
    """FastAPI dependency (overridden in tests)."""
    return PaymentService()
