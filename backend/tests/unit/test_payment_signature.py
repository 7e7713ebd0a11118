import hashlib
import hmac
from unittest.mock import MagicMock

import pytest

from drivigo.core.exceptions import PaymentGatewayException
from drivigo.services.payment_service import PaymentService, compute_payment_signature


def test_compute_payment_signature_is_hmac_sha256_of_order_and_payment():
    expected = hmac.new(b"secret", b"order_1|pay_1", hashlib.sha256).hexdigest()
    assert compute_payment_signature("order_1", "pay_1", "secret") == expected


def test_verify_signature_accepts_valid_signature(db):
    service = PaymentService(db, client=MagicMock())
    signature = compute_payment_signature("order_1", "pay_1", service.key_secret)
    assert service.verify_signature("order_1", "pay_1", signature) is True


@pytest.mark.parametrize(
    "order_id,payment_id,signature",
    [
        ("order_1", "pay_2", None),
        ("order_1", "pay_1", "deadbeef"),
        ("", "pay_1", "deadbeef"),
    ],
)
def test_verify_signature_rejects_tampering(db, order_id, payment_id, signature):
    service = PaymentService(db, client=MagicMock())
    if signature is None:
        # Valid signature for a different payment id
        signature = compute_payment_signature("order_1", "pay_1", service.key_secret)
    assert service.verify_signature(order_id, payment_id, signature) is False


def test_create_order_uses_configured_amount_and_receipt(db):
    client = MagicMock()
    client.order.create.return_value = {"id": "order_123", "amount": 50000, "currency": "INR"}
    service = PaymentService(db, client=client)

    order = service.create_order()

    assert order["id"] == "order_123"
    options = client.order.create.call_args.args[0]
    assert options["amount"] == 50000
    assert options["currency"] == "INR"
    assert options["receipt"].startswith("receipt_order_")


def test_create_order_gateway_failure_raises(db):
    client = MagicMock()
    client.order.create.side_effect = RuntimeError("gateway down")
    service = PaymentService(db, client=client)

    with pytest.raises(PaymentGatewayException) as exc_info:
        service.create_order()
    assert exc_info.value.message == "Server error while creating order."
