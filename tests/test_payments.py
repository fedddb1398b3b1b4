import pytest
from factories import category, customer_id, merchant_id, place_order, product, save_cart, url_prefix


@pytest.fixture
async def pending_order(ac_client):
    """Customer with one order of 2 x 50.00 , expected payment is 100 + 15 shipping."""
    cid = await customer_id(ac_client)
    mid = await merchant_id(ac_client)
    cat = await category(ac_client)
    shirt = await product(ac_client, mid, cat, price=50)
    await save_cart(ac_client, cid, [{"productId": shirt["id"], "quantity": 2}])
    order = (await place_order(ac_client, cid)).json()["order"]
    return cid, mid, shirt, order


async def _pay(ac, order_id, usuario_id, **payment):
    return await ac.patch(f"{url_prefix}/orders/{order_id}",
                          json={"usuarioId": usuario_id, "action": "confirm_payment", "payment": payment})


async def test_exact_amount_moves_order_in_transit(ac_client, pending_order):
    cid, _, _, order = pending_order

    resp = await _pay(ac_client, order["id"], cid, valor=115, tipoPagamento="CARTAO")
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["order"]["status"] == "IN_TRANSIT"
    assert body["order"]["statusLabel"] == "In transit"
    assert body["payment"]["status"] == "PAID"
    assert body["payment"]["amount"] == 115.0
    assert body["payment"]["paymentType"] == "CARTAO"
    assert body["payment"]["subtotal"] == 100.0
    assert body["payment"]["shippingFee"] == 15.0

    detail = (await ac_client.get(f"{url_prefix}/orders/{order['id']}", params={"usuarioId": cid})).json()["order"]
    assert detail["status"] == "IN_TRANSIT"
    assert detail["totalPaid"] == 115.0
    assert detail["remainingBalance"] == 0
    assert [p["paymentType"] for p in detail["payments"]] == ["CARTAO"]


async def test_amount_within_one_cent_is_accepted(ac_client, pending_order):
    cid, _, _, order = pending_order
    resp = await _pay(ac_client, order["id"], cid, valor="115.01")
    assert resp.status_code == 200
    assert resp.json()["payment"]["paymentType"] == "PIX"


@pytest.mark.parametrize("valor, status_code", [
    ("114.99", 200),
    ("115.02", 400),
    ("114.98", 400),
])
async def test_amount_tolerance_boundary(ac_client, pending_order, valor, status_code):
    cid, _, _, order = pending_order
    resp = await _pay(ac_client, order["id"], cid, valor=valor)
    assert resp.status_code == status_code, resp.text


async def test_wrong_amount_is_rejected(ac_client, pending_order):
    cid, _, _, order = pending_order
    resp = await _pay(ac_client, order["id"], cid, valor=114)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Payment amount 114.00 does not match the expected total 115.00"

    detail = (await ac_client.get(f"{url_prefix}/orders/{order['id']}", params={"usuarioId": cid})).json()["order"]
    assert detail["status"] == "PENDING_PAYMENT"
    assert detail["payments"] == []


async def test_custom_shipping_fee(ac_client, pending_order):
    cid, _, _, order = pending_order
    resp = await _pay(ac_client, order["id"], cid, valor=100, frete=0)
    assert resp.status_code == 200
    assert resp.json()["payment"]["shippingFee"] == 0


async def test_expected_total_uses_frozen_prices(ac_client, pending_order):
    cid, mid, shirt, order = pending_order
    await ac_client.put(f"{url_prefix}/products/update", json={"usuarioId": mid, "produtoId": shirt["id"], "preco": 10})

    resp = await _pay(ac_client, order["id"], cid, valor=115)
    assert resp.status_code == 200


async def test_paid_order_cannot_be_paid_again(ac_client, pending_order):
    cid, _, _, order = pending_order
    assert (await _pay(ac_client, order["id"], cid, valor=115)).status_code == 200

    resp = await _pay(ac_client, order["id"], cid, valor=115)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Order cannot be paid while in status 'In transit' (IN_TRANSIT)"

    # the rejected attempt leaves order and payments as they were
    detail = (await ac_client.get(f"{url_prefix}/orders/{order['id']}", params={"usuarioId": cid})).json()["order"]
    assert detail["status"] == "IN_TRANSIT"
    assert len(detail["payments"]) == 1
    assert detail["totalPaid"] == 115.0
    assert detail["remainingBalance"] == 0


async def test_payment_errors(ac_client, pending_order):
    cid, _, _, order = pending_order
    intruder = await customer_id(ac_client)

    no_amount = await _pay(ac_client, order["id"], cid)
    assert no_amount.status_code == 400
    assert no_amount.json()["error"] == "valor is required and must be a number"

    not_number = await _pay(ac_client, order["id"], cid, valor="cem")
    assert not_number.status_code == 400
    assert not_number.json()["error"] == "valor must be a number"

    foreign = await _pay(ac_client, order["id"], intruder, valor=115)
    assert foreign.status_code == 403

    missing = await _pay(ac_client, 9999, cid, valor=115)
    assert missing.status_code == 404


async def test_unknown_action_is_rejected(ac_client, pending_order):
    cid, _, _, order = pending_order
    resp = await ac_client.patch(f"{url_prefix}/orders/{order['id']}", json={"usuarioId": cid, "action": "refund"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Unsupported action: refund"
