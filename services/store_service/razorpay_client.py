"""
Razorpay API client for the store checkout.

Provides:
- Creating a gateway order (payment intent) sized in paise
- Fetching a gateway order, used to cross-check the paid amount
- Local HMAC-SHA256 verification of the checkout signature
"""

import hashlib
import hmac
import logging
from typing import Optional

import httpx
from libs.common.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


class RazorpayError(Exception):
    """Base exception for Razorpay API errors."""

    def __init__(
        self, message: str, status_code: int = None, response_data: dict = None
    ):
        self.message = message
        self.status_code = status_code
        self.response_data = response_data or {}
        super().__init__(message)


def _error_message(data: dict, default: str) -> str:
    error = data.get("error") or {}
    return error.get("description") or data.get("message") or default


class RazorpayClient:
    """Async client for the Razorpay Orders API."""

    def __init__(
        self,
        key_id: str = None,
        key_secret: str = None,
        base_url: str = None,
        timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.key_id = key_id if key_id is not None else settings.RAZORPAY_KEY_ID
        self.key_secret = (
            key_secret if key_secret is not None else settings.RAZORPAY_KEY_SECRET
        )
        self.base_url = (base_url or settings.RAZORPAY_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.RAZORPAY_TIMEOUT_SECONDS
        self._transport = transport

    async def _request(
        self,
        method: str,
        endpoint: str,
        json_data: dict = None,
    ) -> dict:
        """Make an async request to the Razorpay API."""
        if not self.key_id or not self.key_secret:
            raise RazorpayError("Razorpay credentials are not configured")

        url = f"{self.base_url}{endpoint}"

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                auth=(self.key_id, self.key_secret),
                transport=self._transport,
            ) as client:
                response = await client.request(method=method, url=url, json=json_data)
        except httpx.HTTPError as e:
            logger.error("Razorpay request %s %s failed: %s", method, endpoint, e)
            raise RazorpayError(f"Payment gateway unreachable: {e}")

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.is_success:
            logger.error(f"Razorpay API error: {response.status_code} - {data}")
            raise RazorpayError(
                message=_error_message(data, "Unknown Razorpay error"),
                status_code=response.status_code,
                response_data=data,
            )

        return data

    # =========================================================================
    # Orders
    # =========================================================================

    async def create_order(
        self,
        amount_minor_units: int,
        currency: str,
        receipt: str,
        notes: dict = None,
    ) -> dict:
        """
        Create a gateway order the client will pay against.

        Args:
            amount_minor_units: Amount in paise (rupees * 100), integer
            currency: ISO currency code, e.g. INR
            receipt: Merchant receipt identifier (max 40 chars)
            notes: Optional key/value metadata stored with the order

        Returns:
            The gateway order handle (id, amount, currency, receipt, status, ...)
        """
        payload = {
            "amount": int(amount_minor_units),
            "currency": currency,
            "receipt": receipt,
        }
        if notes:
            payload["notes"] = notes

        return await self._request("POST", "/orders", json_data=payload)

    async def fetch_order(self, order_id: str) -> dict:
        """Fetch a gateway order by id."""
        return await self._request("GET", f"/orders/{order_id}")

    # =========================================================================
    # Signatures
    # =========================================================================

    @staticmethod
    def expected_signature(order_id: str, payment_id: str, secret: str) -> str:
        body = f"{order_id}|{payment_id}"
        return hmac.new(
            secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256
        ).hexdigest()

    @classmethod
    def verify_signature(
        cls, order_id: str, payment_id: str, signature: str, secret: str
    ) -> bool:
        """
        Check that ``signature`` proves ``payment_id`` paid ``order_id``.

        Local and deterministic: hex HMAC-SHA256 over ``"{order_id}|{payment_id}"``
        keyed with the account secret. An unset secret never verifies.
        """
        if not secret or not signature:
            return False
        expected = cls.expected_signature(order_id, payment_id, secret)
        return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))


def get_razorpay_client() -> RazorpayClient:
    """Get a RazorpayClient instance (FastAPI dependency)."""
    return RazorpayClient()
