"""
RazorpayX payouts client.

The razorpay SDK only covers the payments API, so payouts go straight to
the REST endpoint with a composite fund account (contact + bank account in
one request).

Usage:
    client = PayoutClient()
    result = await client.create_payout(
        amount=Decimal("1500.00"),
        bank_details={"account_number": "...", "ifsc_code": "...", "account_holder_name": "..."},
        reference_id=str(payout.id),
    )
"""

import logging
from decimal import Decimal
from typing import Optional, Dict, Any

import httpx

from groweasy.config import settings
from groweasy.core.exceptions import PaymentGatewayError
from groweasy.core.utils import to_paise

logger = logging.getLogger(__name__)


class PayoutClient:
    """Thin async wrapper around POST /payouts."""

    def __init__(self):
        self.base_url = settings.RAZORPAY_API_BASE.rstrip("/")
        self.account_number = settings.RAZORPAY_ACCOUNT_NUMBER
        self.auth = (settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET)
        self.timeout = settings.RAZORPAY_TIMEOUT_SECONDS

    def _build_payload(
        self,
        amount: Decimal,
        bank_details: Dict[str, Any],
        reference_id: str,
        narration: Optional[str],
        contact: Optional[Dict[str, Any]],
    ) -> Dict[str, Any]:
        return {
            "account_number": self.account_number,
            "amount": to_paise(amount),
            "currency": "INR",
            "mode": "IMPS",
            "purpose": "payout",
            "fund_account": {
                "account_type": "bank_account",
                "bank_account": {
                    "name": bank_details.get("account_holder_name"),
                    "ifsc": bank_details.get("ifsc_code"),
                    "account_number": bank_details.get("account_number"),
                },
                "contact": contact or {
                    "name": bank_details.get("account_holder_name"),
                    "type": "vendor",
                },
            },
            "queue_if_low_balance": True,
            "reference_id": reference_id,
            "narration": (narration or "Seller payout")[:30],
        }

    async def create_payout(
        self,
        amount: Decimal,
        bank_details: Dict[str, Any],
        reference_id: str,
        narration: Optional[str] = None,
        contact: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Transfer `amount` rupees to the given bank account over IMPS.

        Returns the RazorpayX payout entity. Raises PaymentGatewayError on
        transport errors or any 4xx/5xx response.
        """
        payload = self._build_payload(amount, bank_details, reference_id, narration, contact)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/payouts",
                    json=payload,
                    auth=self.auth,
                    headers={"X-Payout-Idempotency": reference_id},
                )
        except httpx.HTTPError as e:
            logger.error(f"RazorpayX payout request failed for {reference_id}: {e}")
            raise PaymentGatewayError(f"Payout gateway unreachable: {e}") from e

        if response.status_code >= 400:
            logger.error(f"RazorpayX payout error: {response.status_code} - {response.text}")
            try:
                error = response.json().get("error", {})
            except ValueError:
                error = {}
            raise PaymentGatewayError(
                error.get("description") or f"Payout gateway returned {response.status_code}",
                details={"status_code": response.status_code, "code": error.get("code")},
            )

        data = response.json()
        logger.info(f"RazorpayX payout {data.get('id')} created for {reference_id} ({data.get('status')})")
        return data


def get_payout_client() -> PayoutClient:
    """FastAPI dependency (overridden in tests)."""
    return PayoutClient()
