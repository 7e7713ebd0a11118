# backend/drivigo/services/payment_service.py
"""
Razorpay integration: order creation and payment signature verification.
"""

import hashlib
import hmac
import logging
import time
from typing import Any, Dict, Optional

import razorpay
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import PaymentGatewayException
from .base import BaseService

logger = logging.getLogger(__name__)


def compute_payment_signature(order_id: str, payment_id: str, secret: str) -> str:
    """Hex HMAC-SHA256 of ``order_id|payment_id`` keyed with the Razorpay secret."""
    message = f"{order_id}|{payment_id}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


class PaymentService(BaseService):
    def __init__(self, db: Session, client: Optional[razorpay.Client] = None):
        super().__init__(db)
        self.key_secret = settings.razorpay_key_secret.get_secret_value()
        if client is not None:
            self.client: Optional[razorpay.Client] = client
        elif settings.razorpay_configured:
            self.client = razorpay.Client(auth=(settings.razorpay_key_id, self.key_secret))
        else:
            self.client = None
            self.logger.info("Razorpay client disabled - credentials not configured")

    @BaseService.measure_operation("create_order")
    def create_order(self) -> Dict[str, Any]:
        """
        Create a gateway order for one booking.

        Raises:
            PaymentGatewayException: gateway unavailable or call rejected
        """
        if self.client is None:
            raise PaymentGatewayException("Server error while creating order.")

        options = {
            "amount": settings.booking_order_amount,
            "currency": settings.booking_currency,
            "receipt": f"receipt_order_{int(time.time() * 1000)}",
        }
        try:
            order = self.client.order.create(options)
        except Exception as exc:
            self.logger.error("Razorpay order creation failed: %s", exc)
            raise PaymentGatewayException("Server error while creating order.") from exc

        self.log_operation("order_created", order_id=order.get("id"))
        return dict(order)

    def verify_signature(self, order_id: str, payment_id: str, signature: Optional[str]) -> bool:
        """Constant-time check of the checkout callback signature."""
        if not (order_id and payment_id and signature and self.key_secret):
            return False
        expected = compute_payment_signature(order_id, payment_id, self.key_secret)
        return hmac.compare_digest(expected, signature)
