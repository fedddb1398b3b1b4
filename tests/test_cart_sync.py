import asyncio
import json
import httpx
from storefront.cart.store import CartStore, ProductSnapshot
from storefront.cart.sync import CartSync
from factories import category, customer_id, merchant_id, product, save_cart, url_prefix


def _snapshot(product_dict):
    return ProductSnapshot(id=product_dict["id"], name=product_dict["name"], price=product_dict["price"],
                           colors=product_dict["colors"], sizes=product_dict["sizes"],
                           stock_by_variant=product_dict["stockByVariant"])


def _api_item(product_id=7, quantity=2, size="M", color="Preto"):
    return {"id": 1, "productId": product_id, "quantity": quantity, "selectedSize": size, "selectedColor": color,
            "product": {"id": product_id, "name": "Camiseta", "price": 49.9, "image": None, "images": [],
                        "colors": ["Preto"], "sizes": ["M"], "stockByVariant": None}}


def _recording_client(get_items=None, calls=None):
    calls = [] if calls is None else calls

    def handler(request: httpx.Request):
        calls.append((request.method, request.url.path, request.content))
        if request.method == "GET":
            return httpx.Response(200, json={"items": get_items or []})
        return httpx.Response(200, json={"message": "Cart saved"})

    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test"), calls


async def test_hydrate_pulls_server_cart_and_does_not_echo_it_back(ac_client):
    cid = await customer_id(ac_client)
    mid = await merchant_id(ac_client)
    cat = await category(ac_client)
    shirt = await product(ac_client, mid, cat, price=49.9, cores=["Preto"], tamanhos=["M"])
    resp = await save_cart(ac_client, cid, [{"productId": shirt["id"], "quantity": 2,
                                            "selectedSize": "M", "selectedColor": "Preto"}])
    assert resp.status_code == 200

    store = CartStore()
    sync = CartSync(store, ac_client)
    sync.set_user(cid)

    assert await sync.hydrate() is True
    await sync.drain()

    assert len(store) == 1
    line = store.lines[0]
    assert line.product.id == shirt["id"]
    assert line.quantity == 2
    assert (line.selected_size, line.selected_color) == ("M", "Preto")
    assert sync.hydrated_for == cid

    # second call for the same user is a no-op
    assert await sync.hydrate() is False
    sync.close()


async def test_local_changes_are_pushed_to_server(ac_client):
    cid = await customer_id(ac_client)
    mid = await merchant_id(ac_client)
    cat = await category(ac_client)
    shirt = await product(ac_client, mid, cat, price=30)

    store = CartStore()
    sync = CartSync(store, ac_client)
    sync.set_user(cid)
    await sync.hydrate()

    line = store.add(_snapshot(shirt))
    await sync.drain()

    store.set_quantity(line.cart_item_id, 3)
    await sync.drain()

    resp = await ac_client.get(f"{url_prefix}/cart/list", params={"usuarioId": cid})
    body = resp.json()
    assert [it["quantity"] for it in body["items"]] == [3]
    assert body["total"] == 90.0
    sync.close()


async def test_hydrate_skipped_when_local_cart_has_lines():
    client, calls = _recording_client(get_items=[_api_item()])
    async with client:
        store = CartStore()
        sync = CartSync(store, client, auto_persist=False)
        store.add(ProductSnapshot(id=1, name="Boné", price=20))
        sync.set_user("u-1")

        assert await sync.hydrate() is False
        assert sync.hydrated_for == "u-1"
        assert [ln.product.id for ln in store.lines] == [1]
        assert calls == []


async def test_hydrate_sets_store_without_triggering_persist():
    client, calls = _recording_client(get_items=[_api_item(product_id=7, quantity=2)])
    async with client:
        store = CartStore()
        sync = CartSync(store, client)
        sync.set_user("u-1")

        assert await sync.hydrate() is True
        await sync.drain()

        assert [m for m, _, _ in calls] == ["GET"]
        assert store.item_count() == 2

        # the next local change is a real edit and goes out
        store.set_quantity(store.lines[0].cart_item_id, 5)
        await sync.drain()
        assert [m for m, _, _ in calls] == ["GET", "POST"]
        body = json.loads(calls[-1][2])
        assert body == {"usuarioId": "u-1", "items": [{"productId": 7, "quantity": 5,
                                                       "selectedSize": "M", "selectedColor": "Preto"}]}
        sync.close()


async def test_overlapping_persist_is_dropped():
    release = asyncio.Event()
    posted = []

    async def handler(request: httpx.Request):
        posted.append(json.loads(request.content))
        await release.wait()
        return httpx.Response(200, json={"message": "Cart saved"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test") as client:
        store = CartStore()
        sync = CartSync(store, client, auto_persist=False)
        sync.set_user("u-1")
        store.add(ProductSnapshot(id=3, name="Meia", price=10))

        first = asyncio.create_task(sync.persist())
        await asyncio.sleep(0)

        assert await sync.persist() is False

        release.set()
        assert await first is True
        assert len(posted) == 1

        # once the first save landed a new one goes through
        assert await sync.persist() is True
        assert len(posted) == 2


async def test_network_failure_is_logged_not_raised():

    def handler(request: httpx.Request):
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test") as client:
        store = CartStore()
        sync = CartSync(store, client, auto_persist=False)
        sync.set_user("u-1")

        assert await sync.hydrate() is False
        assert sync.hydrated_for is None

        store.add(ProductSnapshot(id=3, name="Meia", price=10))
        assert await sync.persist() is False
        assert len(store) == 1


async def test_server_error_on_persist_returns_false():

    def handler(request: httpx.Request):
        return httpx.Response(404, json={"error": "User not found"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test") as client:
        store = CartStore()
        sync = CartSync(store, client, auto_persist=False)
        sync.set_user("ghost")
        store.add(ProductSnapshot(id=3, name="Meia", price=10))

        assert await sync.persist() is False


async def test_logout_clears_local_cart_without_pushing():
    client, calls = _recording_client()
    async with client:
        store = CartStore()
        sync = CartSync(store, client)
        sync.set_user("u-1")
        store.add(ProductSnapshot(id=3, name="Meia", price=10))
        await sync.drain()
        assert len(calls) == 1

        sync.set_user(None)
        await sync.drain()

        assert store.is_empty()
        assert sync.hydrated_for is None
        assert len(calls) == 1

        # without a user nothing is persisted
        store.add(ProductSnapshot(id=3, name="Meia", price=10))
        await sync.drain()
        assert len(calls) == 1
        assert await sync.persist() is False


async def test_switching_user_allows_a_fresh_hydrate():
    client, calls = _recording_client(get_items=[])
    async with client:
        store = CartStore()
        sync = CartSync(store, client, auto_persist=False)
        sync.set_user("u-1")
        assert await sync.hydrate() is True
        sync.set_user("u-2")
        assert sync.hydrated_for is None
        assert await sync.hydrate() is True
        assert [c[1] for c in calls] == ["/api/cart/list", "/api/cart/list"]
