def register(client, name="Zahra Fabrics!!"):
    resp = client.post("/api/shops", json={
        "name": name,
        "email": "zahra@gmail.com",
        "whatsapp_number": "923001112233",
        "category": "Clothing",
        "payout_info": {"method": "Easypaisa", "account_number": "03001112233", "account_title": "Zahra"},
    })
    assert resp.status_code == 200
    return resp.json()


def test_root(client):
    assert client.get("/").json()["message"] == "PK-Mart Marketplace API running"


def test_registration_flow(client):
    body = register(client)
    shop = body["shop"]
    assert shop["slug"] == "zahra-fabrics"
    assert body["notification"]["type"] == "NEW_SELLER"
    assert body["notification"]["sent"] is False
    assert body["whatsapp_url"].startswith("https://wa.me/")

    bad = client.post(f"/api/shops/{shop['id']}/verify", json={"code": "wrong"})
    assert bad.status_code == 400

    ok = client.post(f"/api/shops/{shop['id']}/verify", json={"code": shop["otp_code"]})
    assert ok.json() == {"verified": True}

    approved = client.post(f"/api/admin/shops/{shop['id']}/approve")
    assert approved.json()["status"] == "active"
    assert "otp_code" not in approved.json()


def test_invalid_email_is_rejected_at_the_api(client):
    resp = client.post("/api/shops", json={"name": "X", "email": "not-an-email", "whatsapp_number": "1"})
    assert resp.status_code == 422


def test_get_shop_by_slug(client):
    register(client)
    shop = client.get("/api/shops/zahra-fabrics").json()
    assert shop["name"] == "Zahra Fabrics!!"
    assert "otp_code" not in shop
    assert client.get("/api/shops/missing-shop").status_code == 404


def test_sellers_and_toggle(client):
    sellers = client.get("/api/sellers").json()
    seller_id = sellers[0]["id"]
    toggled = client.post(f"/api/admin/sellers/{seller_id}/toggle").json()
    assert next(s for s in toggled if s["id"] == seller_id)["status"] == "suspended"


def test_products(client):
    shop_id = client.get("/api/shops").json()[0]["id"]
    created = client.post("/api/products", json={"shop_id": shop_id, "name": "Cap", "price": 800}).json()
    created["price"] = 900
    assert client.put(f"/api/products/{created['id']}", json=created).json() == {"saved": True}
    listed = client.get(f"/api/shops/{shop_id}/products").json()
    assert [p["price"] for p in listed if p["id"] == created["id"]] == [900]
    assert client.post("/api/products", json={"shop_id": "nope", "name": "Cap", "price": 1}).status_code == 404


def test_checkout_and_summary(client):
    shop = client.get("/api/shops").json()[0]
    product = client.post("/api/products", json={"shop_id": shop["id"], "name": "Kit", "price": 250}).json()
    resp = client.post("/api/checkout", json={
        "shop_slug": shop["slug"],
        "items": [{"product_id": product["id"], "quantity": 4, "size": "L"}],
        "customer_name": "Hamza",
        "customer_phone": "923451234567",
        "customer_address": "Peshawar",
    })
    assert resp.status_code == 200
    body = resp.json()
    order = body["order"]
    assert order["total_amount"] == 1000
    assert order["commission"] == {"admin_amount": 950, "seller_amount": 50}
    assert order["id"] in body["notification"]["content"]["whatsapp"]

    updated = client.patch(f"/api/orders/{order['id']}/status", json={"status": "completed"})
    assert updated.json()["status"] == "completed"

    summary = client.get("/api/admin/summary").json()
    assert summary["order_count"] == 1
    assert summary["total_sales"] == 1000
    assert summary["pending_orders"] == 0
    assert summary["shops"][0]["commission_owed"] == 50
    assert summary["shop_count"] >= 1
    assert len(client.get("/api/admin/orders", params={"shop_id": shop["id"]}).json()) == 1


def test_checkout_unknown_product(client):
    shop = client.get("/api/shops").json()[0]
    resp = client.post("/api/checkout", json={
        "shop_slug": shop["slug"],
        "items": [{"product_id": "missing", "quantity": 1}],
        "customer_name": "A",
        "customer_phone": "1",
        "customer_address": "B",
    })
    assert resp.status_code == 404


def test_storage_error_is_a_500(client, backend):
    backend.set("test_registry", "{broken")
    resp = client.get("/api/shops")
    assert resp.status_code == 500
    assert resp.json()["detail"].startswith("Storage error")


def test_diagnostics(client):
    data = client.get("/test").json()
    assert data["storage"] == "✅ Connected & Working"
    assert data["storage_backend"] == "MemoryBackend"


def test_negative_price_rejected_at_the_api(client):
    shop_id = client.get("/api/shops").json()[0]["id"]
    resp = client.post("/api/products", json={"shop_id": shop_id, "name": "Cap", "price": -1})
    assert resp.status_code == 422


def test_verify_active_shop_is_rejected(client):
    shop = client.get("/api/shops").json()[0]
    resp = client.post(f"/api/shops/{shop['id']}/verify", json={"code": "000000"})
    assert resp.status_code == 400
    assert client.get(f"/api/shops/{shop['slug']}").json()["status"] == "active"
