"""Integration tests for the Razorpay payment flow.

The gateway is the in-memory FakeRazorpay from conftest; signatures are
real HMACs over ``order_id|payment_id`` with the test key secret.
"""

import hashlib
import hmac
from decimal import Decimal

import pytest
from libs.common.config import get_settings
from tests.factories import CityFactory, UPSFactory, shipping_payload

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _cart_and_city(client, db, headers, price=Decimal("5999")):
    ups = UPSFactory.create(selling_price=price)
    city = CityFactory.create(name="Jaipur", delivery_charge=Decimal("350"))
    db.add_all([ups, city])
    await db.commit()
    await client.post(
        "/api/cart/add",
        json={"productType": "ups", "productId": str(ups.id)},
        headers=headers,
    )
    return ups, city


async def _open_order(client, headers, city) -> dict:
    response = await client.post(
        "/api/payment/order", json={"cityId": str(city.id)}, headers=headers
    )
    assert response.status_code == 200, response.text
    return response.json()["order"]


def _verify_body(razorpay, order_id, city, payment_id="pay_P1", signature=None):
    return {
        "razorpay_order_id": order_id,
        "razorpay_payment_id": payment_id,
        "razorpay_signature": signature or razorpay.sign(order_id, payment_id),
        "shippingInfo": shipping_payload(city),
    }


# ---------------------------------------------------------------------------
# GET /payment/key
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_key_returns_publishable_key_only(client, user_headers):
    response = await client.get("/api/payment/key", headers=user_headers)

    assert response.status_code == 200
    assert response.json() == {"success": True, "key": "rzp_test_key"}


# ---------------------------------------------------------------------------
# POST /payment/order
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_payment_order_amount_is_cart_plus_delivery_in_paise(
    client, db_session, razorpay, user_headers
):
    _, city = await _cart_and_city(client, db_session, user_headers)

    response = await client.post(
        "/api/payment/order", json={"cityId": str(city.id)}, headers=user_headers
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["key"] == "rzp_test_key"
    assert data["order"]["amount"] == 634900
    assert data["order"]["currency"] == "INR"
    assert data["order"]["receipt"].startswith("receipt_order_")
    assert data["order"]["notes"]["city_id"] == str(city.id)
    assert len(razorpay.requests) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_payment_order_requires_city(client, db_session, razorpay, user_headers):
    await _cart_and_city(client, db_session, user_headers)

    response = await client.post("/api/payment/order", json={}, headers=user_headers)

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "City is required."}
    assert razorpay.requests == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_payment_order_unknown_city(client, db_session, razorpay, user_headers):
    await _cart_and_city(client, db_session, user_headers)

    response = await client.post(
        "/api/payment/order",
        json={"cityId": "7d4f8f8e-0000-4000-8000-000000000000"},
        headers=user_headers,
    )

    assert response.status_code == 404
    assert response.json()["message"] == "City not found."
    assert razorpay.requests == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_payment_order_with_empty_cart(client, db_session, razorpay, user_headers):
    city = CityFactory.create()
    db_session.add(city)
    await db_session.commit()

    response = await client.post(
        "/api/payment/order", json={"cityId": str(city.id)}, headers=user_headers
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Cart is empty"
    assert razorpay.requests == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_payment_order_gateway_failure_is_bad_gateway(
    client, db_session, razorpay, user_headers
):
    _, city = await _cart_and_city(client, db_session, user_headers)
    razorpay.fail_with = 400

    response = await client.post(
        "/api/payment/order", json={"cityId": str(city.id)}, headers=user_headers
    )

    assert response.status_code == 502
    assert response.json() == {
        "success": False,
        "message": "The amount must be at least INR 1.00",
    }


# ---------------------------------------------------------------------------
# POST /payment/verify
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_verify_places_paid_order_and_clears_cart(
    client, db_session, razorpay, user_headers
):
    _, city = await _cart_and_city(client, db_session, user_headers)
    gateway_order = await _open_order(client, user_headers, city)

    response = await client.post(
        "/api/payment/verify",
        json=_verify_body(razorpay, gateway_order["id"], city),
        headers=user_headers,
    )

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["message"] == "Order placed successfully"
    order = data["order"]
    assert order["status"] == "confirmed"
    assert order["paymentInfo"] == {
        "method": "razorpay",
        "status": "Paid",
        "gatewayOrderId": gateway_order["id"],
        "gatewayPaymentId": "pay_P1",
        "amountPaid": 6349.0,
    }
    assert order["pricing"] == {
        "subtotal": 5999.0,
        "deliveryCharge": 350.0,
        "tax": 0.0,
        "total": 6349.0,
    }
    assert order["shippingDetails"]["city"] == "Jaipur"

    cart = await client.get("/api/cart", headers=user_headers)
    assert cart.json()["items"] == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_verify_without_city_uses_city_from_payment_order(
    client, db_session, razorpay, user_headers
):
    _, city = await _cart_and_city(client, db_session, user_headers)
    gateway_order = await _open_order(client, user_headers, city)
    body = _verify_body(razorpay, gateway_order["id"], city)
    body["shippingInfo"].pop("cityId")

    response = await client.post(
        "/api/payment/verify", json=body, headers=user_headers
    )

    assert response.status_code == 201, response.text
    order = response.json()["order"]
    assert order["pricing"]["deliveryCharge"] == 350.0
    assert order["pricing"]["total"] == 6349.0
    assert order["paymentInfo"]["amountPaid"] == 6349.0
    assert order["shippingDetails"]["city_id"] == str(city.id)
    assert order["shippingDetails"]["city"] == "Jaipur"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_verify_refuses_when_secret_is_not_configured(
    client, db_session, razorpay, user_headers, monkeypatch
):
    monkeypatch.setattr(get_settings(), "RAZORPAY_VERIFY_AMOUNT", False)
    monkeypatch.setattr(razorpay, "key_secret", "")
    _, city = await _cart_and_city(client, db_session, user_headers)
    forged = hmac.new(b"", b"order_forged|pay_forged", hashlib.sha256).hexdigest()

    response = await client.post(
        "/api/payment/verify",
        json=_verify_body(
            razorpay, "order_forged", city, payment_id="pay_forged", signature=forged
        ),
        headers=user_headers,
    )

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "message": "Payment gateway is not configured",
    }
    orders = await client.get("/api/orders/user", headers=user_headers)
    assert orders.json()["pagination"]["total"] == 0
    cart = await client.get("/api/cart", headers=user_headers)
    assert len(cart.json()["items"]) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_verify_rejects_bad_signature_and_keeps_cart(
    client, db_session, razorpay, user_headers
):
    _, city = await _cart_and_city(client, db_session, user_headers)
    gateway_order = await _open_order(client, user_headers, city)
    good = razorpay.sign(gateway_order["id"], "pay_P1")
    forged = ("0" if good[0] != "0" else "1") + good[1:]

    response = await client.post(
        "/api/payment/verify",
        json=_verify_body(razorpay, gateway_order["id"], city, signature=forged),
        headers=user_headers,
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Invalid signature."}

    orders = await client.get("/api/orders/user", headers=user_headers)
    assert orders.json()["pagination"]["total"] == 0
    cart = await client.get("/api/cart", headers=user_headers)
    assert len(cart.json()["items"]) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_verify_resubmission_returns_same_order(
    client, db_session, razorpay, user_headers
):
    _, city = await _cart_and_city(client, db_session, user_headers)
    gateway_order = await _open_order(client, user_headers, city)
    body = _verify_body(razorpay, gateway_order["id"], city)

    first = await client.post("/api/payment/verify", json=body, headers=user_headers)
    second = await client.post("/api/payment/verify", json=body, headers=user_headers)

    assert first.status_code == 201
    assert second.status_code == 200
    assert second.json()["message"] == "Order already placed for this payment"
    assert second.json()["order"]["id"] == first.json()["order"]["id"]

    orders = await client.get("/api/orders/user", headers=user_headers)
    assert orders.json()["pagination"]["total"] == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_verify_resubmission_by_another_user_is_rejected(
    client, db_session, razorpay, user_headers, other_user_headers
):
    _, city = await _cart_and_city(client, db_session, user_headers)
    gateway_order = await _open_order(client, user_headers, city)
    body = _verify_body(razorpay, gateway_order["id"], city)
    await client.post("/api/payment/verify", json=body, headers=user_headers)

    response = await client.post(
        "/api/payment/verify", json=body, headers=other_user_headers
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
@pytest.mark.integration
async def test_verify_amount_mismatch_places_no_order(
    client, db_session, razorpay, user_headers
):
    ups, city = await _cart_and_city(client, db_session, user_headers)
    gateway_order = await _open_order(client, user_headers, city)

    # Price changed between opening the gateway order and paying it
    ups.selling_price = Decimal("4999")
    await db_session.commit()

    response = await client.post(
        "/api/payment/verify",
        json=_verify_body(razorpay, gateway_order["id"], city),
        headers=user_headers,
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Paid amount does not match the order total"
    orders = await client.get("/api/orders/user", headers=user_headers)
    assert orders.json()["pagination"]["total"] == 0
    cart = await client.get("/api/cart", headers=user_headers)
    assert len(cart.json()["items"]) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_verify_unknown_gateway_order_is_bad_gateway(
    client, db_session, razorpay, user_headers
):
    _, city = await _cart_and_city(client, db_session, user_headers)

    response = await client.post(
        "/api/payment/verify",
        json=_verify_body(razorpay, "order_missing", city),
        headers=user_headers,
    )

    assert response.status_code == 502
    assert response.json()["message"] == "The id provided does not exist"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_verify_skips_amount_check_when_disabled(
    client, db_session, razorpay, user_headers, monkeypatch
):
    monkeypatch.setattr(get_settings(), "RAZORPAY_VERIFY_AMOUNT", False)
    _, city = await _cart_and_city(client, db_session, user_headers)

    response = await client.post(
        "/api/payment/verify",
        json=_verify_body(razorpay, "order_offline", city),
        headers=user_headers,
    )

    assert response.status_code == 201, response.text
    assert razorpay.requests == []


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize(
    "missing", ["razorpay_order_id", "razorpay_payment_id", "razorpay_signature"]
)
async def test_verify_requires_every_gateway_field(
    client, db_session, razorpay, user_headers, missing
):
    _, city = await _cart_and_city(client, db_session, user_headers)
    body = _verify_body(razorpay, "order_N1", city)
    body.pop(missing)

    response = await client.post(
        "/api/payment/verify", json=body, headers=user_headers
    )

    assert response.status_code == 400
    assert missing in response.json()["message"]
