"""Product Routes — public catalog reads and admin-only writes.

Tests cover:
    - Listing shows active products only, paginated by skip/limit and filtered by category
    - sortBy/order reorder the listing; unknown sort fields are 400
    - /categories lists distinct active categories and is not read as an id
    - Unknown product is 404
    - USER gets 403 on every write; missing token is 401
    - ADMIN create (201), partial update via PUT or PATCH, soft delete
    - Soft-deleted products stay in existing carts but cannot be re-added
"""

NEW_PRODUCT = {
    "title": "Wireless Headphones",
    "description": "Over-ear headphones with noise cancelling.",
    "price": "79.90",
    "stock": 12,
    "brand": "Acme",
    "category": "Audio",
}


# ─── reads ──────────────────────────────────────────────────────

async def test_list_shows_active_products_only(client, make_product):
    await make_product(title="Phone")
    await make_product(title="Retired", is_active=False)

    res = await client.get("/api/v1/products")
    assert res.status_code == 200
    body = res.json()
    assert body["results"] == 1
    assert [p["title"] for p in body["data"]["products"]] == ["Phone"]
    assert body["data"]["total"] == 1


async def test_list_pagination(client, make_product):
    for i in range(5):
        await make_product(title=f"Product {i}")

    res = await client.get("/api/v1/products", params={"limit": 2, "skip": 2})
    data = res.json()["data"]
    assert len(data["products"]) == 2
    assert data["total"] == 5
    assert data["limit"] == 2
    assert data["skip"] == 2
    assert data["pages"] == 3


async def test_list_skip_past_the_end_is_empty(client, make_product):
    await make_product(title="Phone")

    res = await client.get("/api/v1/products", params={"skip": 5})
    data = res.json()["data"]
    assert data["products"] == []
    assert data["skip"] == 5
    assert data["total"] == 1


async def test_list_defaults_to_newest_first(client, make_product):
    await make_product(title="Old")
    await make_product(title="New")

    res = await client.get("/api/v1/products")
    titles = [p["title"] for p in res.json()["data"]["products"]]
    assert titles == ["New", "Old"]
    assert res.json()["data"]["skip"] == 0


async def test_list_sorts_by_price(client, make_product):
    await make_product(title="Mid", price="50.00")
    await make_product(title="Cheap", price="5.00")
    await make_product(title="Premium", price="500.00")

    asc = await client.get(
        "/api/v1/products", params={"sortBy": "price", "order": "asc"},
    )
    desc = await client.get("/api/v1/products", params={"sortBy": "price"})

    assert [p["title"] for p in asc.json()["data"]["products"]] == [
        "Cheap", "Mid", "Premium",
    ]
    assert [p["title"] for p in desc.json()["data"]["products"]] == [
        "Premium", "Mid", "Cheap",
    ]


async def test_list_rejects_unknown_sort_field(client):
    res = await client.get("/api/v1/products", params={"sortBy": "secret"})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_list_filters_by_category(client, make_product):
    await make_product(title="Phone", category="smartphones")
    await make_product(title="Laptop", category="laptops")

    res = await client.get("/api/v1/products", params={"category": "Laptops"})
    titles = [p["title"] for p in res.json()["data"]["products"]]
    assert titles == ["Laptop"]


async def test_list_rejects_bad_limit(client):
    res = await client.get("/api/v1/products", params={"limit": 0})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_categories_lists_distinct_active_categories(client, make_product):
    await make_product(title="Phone", category="smartphones")
    await make_product(title="Phone 2", category="smartphones")
    await make_product(title="Laptop", category="laptops")
    await make_product(title="Retired", category="cameras", is_active=False)
    await make_product(title="Loose", category=None)

    res = await client.get("/api/v1/products/categories")
    assert res.status_code == 200
    body = res.json()
    assert body["results"] == 2
    assert body["data"]["categories"] == ["laptops", "smartphones"]


async def test_categories_empty_catalog(client):
    res = await client.get("/api/v1/products/categories")
    assert res.status_code == 200
    assert res.json()["data"]["categories"] == []


async def test_get_product(client, make_product):
    product = await make_product(title="Phone", price="999.99", stock=3)
    res = await client.get(f"/api/v1/products/{product.id}")
    assert res.status_code == 200
    data = res.json()["data"]["product"]
    assert data["title"] == "Phone"
    assert data["price"] == 999.99
    assert data["stock"] == 3
    assert data["isActive"] is True


async def test_get_unknown_product_is_404(client):
    res = await client.get("/api/v1/products/999")
    assert res.status_code == 404
    assert res.json()["error"]["message"] == "Product not found"


# ─── writes ─────────────────────────────────────────────────────

async def test_create_requires_token(client):
    res = await client.post("/api/v1/products", json=NEW_PRODUCT)
    assert res.status_code == 401


async def test_user_cannot_write(client, user_headers, make_product):
    product = await make_product()

    create = await client.post(
        "/api/v1/products", json=NEW_PRODUCT, headers=user_headers,
    )
    update = await client.patch(
        f"/api/v1/products/{product.id}", json={"stock": 1},
        headers=user_headers,
    )
    delete = await client.delete(
        f"/api/v1/products/{product.id}", headers=user_headers,
    )

    for res in (create, update, delete):
        assert res.status_code == 403
        assert res.json()["error"]["message"] == (
            "Forbidden: You do not have permission to perform this action"
        )


async def test_admin_creates_product(client, admin_headers):
    res = await client.post(
        "/api/v1/products", json=NEW_PRODUCT, headers=admin_headers,
    )
    assert res.status_code == 201
    body = res.json()
    assert body["message"] == "Product created successfully"
    product = body["data"]["product"]
    assert product["price"] == 79.9
    assert product["category"] == "audio"
    assert product["isActive"] is True

    fetched = await client.get(f"/api/v1/products/{product['id']}")
    assert fetched.status_code == 200


async def test_create_validation(client, admin_headers):
    res = await client.post(
        "/api/v1/products",
        json={**NEW_PRODUCT, "price": "0", "stock": -1},
        headers=admin_headers,
    )
    assert res.status_code == 400
    fields = {d["field"] for d in res.json()["error"]["details"]}
    assert fields == {"body.price", "body.stock"}


async def test_admin_partial_update(client, admin_headers, make_product):
    product = await make_product(title="Phone", price="10.00", stock=5)

    res = await client.patch(
        f"/api/v1/products/{product.id}", json={"stock": 9},
        headers=admin_headers,
    )
    assert res.status_code == 200
    data = res.json()["data"]["product"]
    assert data["stock"] == 9
    assert data["title"] == "Phone"
    assert data["price"] == 10.0


async def test_admin_update_via_put(client, admin_headers, make_product):
    product = await make_product(title="Phone", price="10.00", stock=5)

    res = await client.put(
        f"/api/v1/products/{product.id}",
        json={"price": "12.50", "category": "Phones"},
        headers=admin_headers,
    )
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Product updated successfully"
    data = body["data"]["product"]
    assert data["price"] == 12.5
    assert data["category"] == "phones"
    assert data["stock"] == 5


async def test_user_cannot_update_via_put(client, user_headers, make_product):
    product = await make_product()
    res = await client.put(
        f"/api/v1/products/{product.id}", json={"stock": 1},
        headers=user_headers,
    )
    assert res.status_code == 403


async def test_update_unknown_product_is_404(client, admin_headers):
    res = await client.patch(
        "/api/v1/products/999", json={"stock": 1}, headers=admin_headers,
    )
    assert res.status_code == 404


async def test_soft_delete_keeps_cart_line(
    client, admin_headers, user_headers, make_product,
):
    product = await make_product(price="5.00", stock=5)
    await client.post(
        "/api/v1/cart/items", json={"productId": product.id, "quantity": 2},
        headers=user_headers,
    )

    res = await client.delete(
        f"/api/v1/products/{product.id}", headers=admin_headers,
    )
    assert res.status_code == 200
    assert res.json()["message"] == "Product deleted successfully"

    listing = await client.get("/api/v1/products")
    assert listing.json()["data"]["products"] == []

    cart = (await client.get("/api/v1/cart", headers=user_headers)).json()
    line = cart["data"]["cart"]["items"][0]
    assert line["quantity"] == 2
    assert line["product"]["isActive"] is False

    res = await client.post(
        "/api/v1/cart/items", json={"productId": product.id},
        headers=user_headers,
    )
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Product is not available"
