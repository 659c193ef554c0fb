from decimal import Decimal

from brew_cafe.models import Profile, RoleEnum
from tests.conftest import ADMIN_TOKEN, CUSTOMER_TOKEN, OTHER_TOKEN, auth

ADMIN = auth(ADMIN_TOKEN)


# setup-admin


async def test_setup_admin_outcomes(client, db, seed):
    db.add(Profile(id="cust-2", email="bob@brew.test", full_name="bob", role=RoleEnum.customer))
    await db.commit()

    created = await client.get("/api/setup-admin", headers=auth(CUSTOMER_TOKEN))
    promoted = await client.get("/api/setup-admin", headers=auth(OTHER_TOKEN))
    unchanged = await client.get("/api/setup-admin", headers=ADMIN)

    assert created.json()["message"] == "Admin profile created! You can now access /admin."
    assert created.json()["profile"]["role"] == "admin"
    assert created.json()["profile"]["full_name"] == "alice"
    assert promoted.json()["message"] == "Role updated to admin! You can now access /admin."
    assert unchanged.json()["message"] == "You are already an admin!"

    now_admin = await client.get("/admin/coupons/", headers=auth(OTHER_TOKEN))
    assert now_admin.status_code == 200


async def test_setup_admin_requires_session(client):
    resp = await client.get("/api/setup-admin")
    assert resp.status_code == 401


# coupons


async def test_coupon_crud(client, seed):
    created = await client.post(
        "/admin/coupons/",
        json={"code": " welcome10 ", "discount_type": "percent", "discount_value": 10, "max_uses": 5},
        headers=ADMIN,
    )
    assert created.status_code == 201
    coupon = created.json()
    assert coupon["code"] == "WELCOME10"
    assert coupon["used_count"] == 0

    duplicate = await client.post(
        "/admin/coupons/",
        json={"code": "welcome10", "discount_type": "fixed", "discount_value": 5},
        headers=ADMIN,
    )
    assert duplicate.status_code == 409

    updated = await client.patch(f"/admin/coupons/{coupon['id']}", json={"max_uses": 8}, headers=ADMIN)
    assert updated.json()["max_uses"] == 8

    toggled = await client.post(f"/admin/coupons/{coupon['id']}/toggle", headers=ADMIN)
    assert toggled.json()["is_active"] is False

    listed = await client.get("/admin/coupons/", headers=ADMIN)
    assert {c["code"] for c in listed.json()} == {"FLAT50", "SAVE20", "WELCOME10"}

    deleted = await client.delete(f"/admin/coupons/{coupon['id']}", headers=ADMIN)
    assert deleted.status_code == 204
    assert (await client.delete(f"/admin/coupons/{coupon['id']}", headers=ADMIN)).status_code == 404


async def test_percent_coupon_over_hundred_rejected(client, seed):
    resp = await client.post(
        "/admin/coupons/",
        json={"code": "HUGE", "discount_type": "percent", "discount_value": 150},
        headers=ADMIN,
    )
    assert resp.status_code == 422


async def test_max_uses_below_used_count_rejected(client, db, seed):
    seed.save20.used_count = 4
    await db.commit()

    resp = await client.patch(f"/admin/coupons/{seed.save20.id}", json={"max_uses": 3}, headers=ADMIN)
    assert resp.status_code == 400


async def test_validate_coupon_endpoint(client, seed):
    ok = await client.post("/coupons/validate", json={"code": "flat50", "subtotal": 200})
    missing = await client.post("/coupons/validate", json={"code": "NOPE", "subtotal": 200})
    empty = await client.post("/coupons/validate", json={"code": "  ", "subtotal": 200})

    assert ok.json()["valid"] is True
    assert ok.json()["status"] == "ELIGIBLE"
    assert ok.json()["coupon"]["id"] == seed.flat50.id
    assert missing.json()["status"] == "NOT_FOUND"
    assert missing.json()["coupon"] is None
    assert empty.status_code == 400


# menu


async def test_public_menu_hides_unavailable_items(client, seed):
    public = (await client.get("/menu/")).json()
    full = (await client.get("/admin/menu/", headers=ADMIN)).json()

    assert [c["name"] for c in public] == ["Drinks", "Food"]
    public_items = {i["name"] for c in public for i in c["menu_items"]}
    full_items = {i["name"] for c in full for i in c["menu_items"]}
    assert public_items == {"Latte", "Sandwich"}
    assert full_items == {"Latte", "Sandwich", "Muffin"}


async def test_menu_item_lifecycle(client, seed):
    created = await client.post(
        "/admin/menu/items",
        json={"category_id": seed.drinks.id, "name": "Mocha", "price": 120},
        headers=ADMIN,
    )
    assert created.status_code == 201
    item_id = created.json()["id"]

    patched = await client.patch(f"/admin/menu/items/{item_id}", json={"price": 130}, headers=ADMIN)
    assert Decimal(str(patched.json()["price"])) == Decimal("130")

    toggled = await client.post(f"/admin/menu/items/{item_id}/toggle", headers=ADMIN)
    assert toggled.json()["available"] is False

    assert (await client.delete(f"/admin/menu/items/{item_id}", headers=ADMIN)).status_code == 204


async def test_delete_category_removes_its_items(client, seed):
    resp = await client.delete(f"/admin/menu/categories/{seed.food.id}", headers=ADMIN)
    assert resp.status_code == 204

    full = (await client.get("/admin/menu/", headers=ADMIN)).json()
    assert [c["name"] for c in full] == ["Drinks"]
    assert {i["name"] for i in full[0]["menu_items"]} == {"Latte"}


async def test_category_create_and_rename(client, seed):
    created = await client.post("/admin/menu/categories", json={"name": "Desserts", "sort_order": 3}, headers=ADMIN)
    renamed = await client.patch(
        f"/admin/menu/categories/{created.json()['id']}", json={"name": "Sweets"}, headers=ADMIN
    )

    assert renamed.json()["name"] == "Sweets"
    assert (await client.patch("/admin/menu/categories/999", json={"name": "x"}, headers=ADMIN)).status_code == 404


# tables


async def test_tables_crud(client, seed):
    created = await client.post("/admin/tables/", json={"table_number": 7, "capacity": 6}, headers=ADMIN)
    assert created.status_code == 201
    table_id = created.json()["id"]

    toggled = await client.post(f"/admin/tables/{table_id}/toggle", headers=ADMIN)
    assert toggled.json()["is_available"] is False

    patched = await client.patch(f"/admin/tables/{table_id}", json={"capacity": 8}, headers=ADMIN)
    assert patched.json()["capacity"] == 8

    listed = (await client.get("/tables/")).json()
    assert {t["table_number"] for t in listed} == {4, 7}

    assert (await client.delete(f"/admin/tables/{table_id}", headers=ADMIN)).status_code == 204
    assert (await client.post("/admin/tables/", json={"table_number": 7}, headers=auth(CUSTOMER_TOKEN))).status_code == 403


# settings


async def test_settings_defaults_then_saved(client, seed):
    defaults = (await client.get("/settings")).json()
    assert defaults["cafe_name"] == "The Brew"
    assert defaults["configured"] is False

    first = await client.put("/admin/settings", json={"cafe_name": "Bean There", "logo_url": "/logo.png"}, headers=ADMIN)
    second = await client.put("/admin/settings", json={"cafe_name": "Bean Here"}, headers=ADMIN)

    assert first.json()["configured"] is True
    assert second.json()["id"] == first.json()["id"]

    current = (await client.get("/settings")).json()
    assert current["cafe_name"] == "Bean Here"
    assert current["logo_url"] == ""


async def test_settings_update_requires_admin(client, seed):
    resp = await client.put("/admin/settings", json={"cafe_name": "Nope"}, headers=auth(CUSTOMER_TOKEN))
    assert resp.status_code == 403


# customers and cart


async def test_customers_summary(client, seed, gateway):
    from tests.conftest import sign

    gateway.register("order_c1", 21000)
    body = {
        "razorpay_order_id": "order_c1",
        "razorpay_payment_id": "pay_c1",
        "razorpay_signature": sign("order_c1", "pay_c1"),
        "order_data": {
            "items": [{"id": seed.latte.id, "price": 100, "quantity": 2}],
            "subtotal": 200,
            "total": 210,
        },
    }
    assert (await client.post("/api/razorpay/verify-payment", json=body, headers=auth(CUSTOMER_TOKEN))).status_code == 200

    customers = {c["id"]: c for c in (await client.get("/admin/customers/", headers=ADMIN)).json()}

    assert customers["cust-1"]["order_count"] == 1
    assert Decimal(str(customers["cust-1"]["total_spent"])) == Decimal("210")
    assert customers["admin-1"]["order_count"] == 0


async def test_cart_quote_with_coupon(client, seed):
    resp = await client.post(
        "/cart/quote",
        json={
            "items": [
                {"menu_item_id": seed.latte.id, "quantity": 1},
                {"menu_item_id": seed.latte.id, "quantity": 1},
            ],
            "coupon_code": "save20",
        },
    )

    data = resp.json()
    assert resp.status_code == 200
    assert data["item_count"] == 2
    assert len(data["items"]) == 1
    assert Decimal(str(data["subtotal"])) == Decimal("200")
    assert Decimal(str(data["discount"])) == Decimal("40")
    assert Decimal(str(data["tax"])) == Decimal("8")
    assert Decimal(str(data["total"])) == Decimal("168")
    assert data["coupon"]["status"] == "ELIGIBLE"


async def test_cart_quote_rejects_unavailable_item(client, seed):
    resp = await client.post("/cart/quote", json={"items": [{"menu_item_id": seed.muffin.id, "quantity": 1}]})
    assert resp.status_code == 400
