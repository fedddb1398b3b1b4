from factories import url_prefix


async def test_create_and_list_categories_sorted_by_name(ac_client):
    for name in ("Camisetas", "Bonés", "Acessórios"):
        resp = await ac_client.post(f"{url_prefix}/categories/create", json={"nome": name})
        assert resp.status_code == 201, resp.text

    resp = await ac_client.get(f"{url_prefix}/categories/list")
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 3
    assert [c["name"] for c in body["categories"]] == ["Acessórios", "Bonés", "Camisetas"]


async def test_create_category_keeps_description(ac_client):
    resp = await ac_client.post(f"{url_prefix}/categories/create",
                                json={"nome": "  Moletons ", "descricao": "Peças de inverno"})
    assert resp.status_code == 201
    category = resp.json()["category"]
    assert category["name"] == "Moletons"
    assert category["description"] == "Peças de inverno"
    assert isinstance(category["id"], int)


async def test_category_name_is_required(ac_client):
    resp = await ac_client.post(f"{url_prefix}/categories/create", json={"nome": "   "})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Category name is required"


async def test_duplicate_category_name_ignores_case(ac_client):
    await ac_client.post(f"{url_prefix}/categories/create", json={"nome": "Camisetas"})
    resp = await ac_client.post(f"{url_prefix}/categories/create", json={"nome": "camisetas"})
    assert resp.status_code == 409
    assert resp.json()["error"] == "A category with this name already exists"
