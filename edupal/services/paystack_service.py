"""
Paystack REST client
"""
import hashlib
import hmac
import logging
from typing import Any, Dict, Optional

import httpx

from edupal.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)


class PaystackClient:
    """Transaction initialization, verification and webhook signatures"""

    def __init__(
        self,
        secret_key: str,
        base_url: str = "https://api.paystack.co",
        timeout: float = 30.0,
        http_client: Optional[httpx.Client] = None
    ):
        self.secret_key = secret_key
        self.http = http_client or httpx.Client(base_url=base_url, timeout=timeout)

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.secret_key}"}

    def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self.http.request(method, url, headers=self._headers(), **kwargs)
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Paystack {method} {url} failed: {str(e)}")
            raise UpstreamServiceError("Payment gateway unavailable", status_code=502)

    def initialize_transaction(
        self,
        email: str,
        amount_kobo: int,
        reference: str,
        callback_url: str,
        metadata: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Start a checkout

        Returns:
            Paystack's data object (authorization_url, access_code, reference)
        """
        payload = self._request("POST", "/transaction/initialize", json={
            "email": email,
            "amount": amount_kobo,
            "currency": "NGN",
            "reference": reference,
            "callback_url": callback_url,
            "metadata": metadata,
        })

        if not payload.get("status"):
            logger.error(f"Paystack initialize error: {payload}")
            raise UpstreamServiceError("Payment initialization failed", status_code=502)

        return payload["data"]

    def verify_transaction(self, reference: str) -> Optional[Dict[str, Any]]:
        """Transaction data if Paystack reports it successful, else None"""
        payload = self._request("GET", f"/transaction/verify/{reference}")

        data = payload.get("data") or {}
        if not payload.get("status") or data.get("status") != "success":
            logger.warning(f"Transaction {reference} not successful: {payload.get('message')}")
            return None
        return data

    def verify_signature(self, body: bytes, signature: Optional[str]) -> bool:
        """Webhook signature is the hex HMAC-SHA512 of the raw body"""
        if not self.secret_key:
            logger.error("PAYSTACK_SECRET_KEY not set; rejecting webhook")
            return False

        expected = hmac.new(self.secret_key.encode(), body, hashlib.sha512).hexdigest()
        return hmac.compare_digest(expected, signature or "")
