from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
import pytest
from fastapi import HTTPException
from storefront.sales.services import aggregate_sales, parse_date_filter
from factories import category, customer_id, merchant_id, place_order, product, save_cart, url_prefix


def _order(id, day):
    return SimpleNamespace(id=id, created_at=datetime(2025, 3, day, 12, tzinfo=timezone.utc))


def _item(product_id, quantity, price, color=None, size=None):
    return SimpleNamespace(product_id=product_id, quantity=quantity, unit_price=Decimal(price),
                           selected_color=color, selected_size=size)


@pytest.fixture
def history():
    products = {
        1: SimpleNamespace(id=1, name="Camiseta", category_id=10, active=True),
        2: SimpleNamespace(id=2, name="Boné", category_id=20, active=False),
    }
    orders = [_order(100, 1), _order(101, 5), _order(102, 3)]
    items = {
        100: [_item(1, 2, "50.00", "Preto", "M"), _item(2, 1, "30.00")],
        101: [_item(1, 1, "60.00", "Preto", "M"), _item(1, 3, "60.00", "Branco", "G")],
        102: [_item(2, 4, "25.00")],
    }
    return orders, items, products, {10: "Camisetas", 20: "Bonés"}, {1: "https://cdn.example.com/1.png"}


def test_aggregates_per_product_sorted_by_revenue(history):
    report = aggregate_sales(*history)
    rows = report["salesHistory"]

    assert [r["productId"] for r in rows] == [1, 2]
    shirt, cap = rows
    assert shirt["totalQuantity"] == 6
    assert shirt["totalRevenue"] == 340.0
    assert shirt["orderCount"] == 2
    assert shirt["averagePrice"] == pytest.approx(56.67)
    assert shirt["lastSale"] == datetime(2025, 3, 5, 12, tzinfo=timezone.utc)
    assert shirt["category"] == "Camisetas"
    assert shirt["primaryImage"] == "https://cdn.example.com/1.png"
    # ties keep first-seen order
    assert shirt["topVariants"] == [
        {"color": "Preto", "size": "M", "quantity": 3},
        {"color": "Branco", "size": "G", "quantity": 3},
    ]

    assert cap["active"] is False
    assert cap["primaryImage"] is None
    assert cap["topVariants"] == [{"color": None, "size": None, "quantity": 5}]

    assert report["summary"] == {"totalUnits": 11, "totalRevenue": 470.0, "totalOrders": 3}


def test_category_filter_skips_lines_and_their_orders(history):
    report = aggregate_sales(*history, category_id=20)
    assert [r["productId"] for r in report["salesHistory"]] == [2]
    # order 101 only had shirts , so it does not count
    assert report["summary"] == {"totalUnits": 5, "totalRevenue": 130.0, "totalOrders": 2}


def test_top_variants_are_capped(history):
    orders, _, products, categories, images = history
    items = {100: [_item(1, q, "10.00", f"C{q}", "M") for q in range(1, 8)]}
    report = aggregate_sales(orders[:1], items, products, categories, images, top_variants=5)
    variants = report["salesHistory"][0]["topVariants"]
    assert [v["quantity"] for v in variants] == [7, 6, 5, 4, 3]


def test_empty_history():
    report = aggregate_sales([], {}, {}, {}, {})
    assert report == {"salesHistory": [], "summary": {"totalUnits": 0, "totalRevenue": 0.0, "totalOrders": 0}}


def test_date_filter_parsing():
    assert parse_date_filter(None, "dataInicio") is None
    assert parse_date_filter("  ", "dataInicio") is None
    assert parse_date_filter("2025-03-01", "dataInicio") == datetime(2025, 3, 1, tzinfo=timezone.utc)
    end = parse_date_filter("2025-03-01", "dataFim", end_of_day=True)
    assert end == datetime(2025, 3, 1, 23, 59, 59, 999000, tzinfo=timezone.utc)

    with pytest.raises(HTTPException) as exc:
        parse_date_filter("01/03/2025", "dataFim")
    assert exc.value.status_code == 400
    assert exc.value.detail == "dataFim is not a valid date"


async def _sell(ac, cid, items):
    await save_cart(ac, cid, items)
    resp = await place_order(ac, cid)
    assert resp.status_code == 201, resp.text
    return resp.json()["order"]


async def test_sales_history_endpoint(ac_client):
    cid = await customer_id(ac_client)
    mid = await merchant_id(ac_client)
    other = await merchant_id(ac_client)
    shirts = await category(ac_client, "Camisetas")
    caps = await category(ac_client, "Bonés")
    shirt = await product(ac_client, mid, shirts, name="Camiseta", price=50, cores=["Preto"], tamanhos=["M"])
    cap = await product(ac_client, mid, caps, name="Boné", price=20)
    foreign = await product(ac_client, other, caps, name="Meia", price=5)

    await _sell(ac_client, cid, [{"productId": shirt["id"], "quantity": 2,
                                  "selectedColor": "Preto", "selectedSize": "M"}])
    await _sell(ac_client, cid, [{"productId": cap["id"], "quantity": 1}])
    await _sell(ac_client, cid, [{"productId": foreign["id"], "quantity": 9}])

    resp = await ac_client.get(f"{url_prefix}/sales/history", params={"usuarioId": mid})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["message"] == "Sales history loaded"
    assert [r["name"] for r in body["salesHistory"]] == ["Camiseta", "Boné"]
    assert body["salesHistory"][0]["topVariants"] == [{"color": "Preto", "size": "M", "quantity": 2}]
    assert body["summary"] == {"totalUnits": 3, "totalRevenue": 120.0, "totalOrders": 2}

    only_caps = (await ac_client.get(f"{url_prefix}/sales/history",
                                     params={"usuarioId": mid, "categoriaId": caps})).json()
    assert [r["name"] for r in only_caps["salesHistory"]] == ["Boné"]

    past = (await ac_client.get(f"{url_prefix}/sales/history",
                                params={"usuarioId": mid, "dataFim": "2000-01-01"})).json()
    assert past["salesHistory"] == []
    assert past["message"] == "No sales found for this merchant"


async def test_sales_history_rejects_bad_filters_and_customers(ac_client):
    mid = await merchant_id(ac_client)
    cid = await customer_id(ac_client)

    bad_category = await ac_client.get(f"{url_prefix}/sales/history", params={"usuarioId": mid, "categoriaId": "x"})
    assert bad_category.status_code == 400
    assert bad_category.json()["error"] == "categoriaId must be a valid number"

    bad_date = await ac_client.get(f"{url_prefix}/sales/history", params={"usuarioId": mid, "dataInicio": "ontem"})
    assert bad_date.status_code == 400

    as_customer = await ac_client.get(f"{url_prefix}/sales/history", params={"usuarioId": cid})
    assert as_customer.status_code == 403
