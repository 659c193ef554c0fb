from decimal import Decimal

import pytest
from sqlalchemy import func, select

from brew_cafe.crud.order import create_paid_order
from brew_cafe.crud.profile import ensure_profile
from brew_cafe.models import Order, OrderItem
from brew_cafe.services.pricing import CartLine, calculate_pricing
from tests.conftest import ADMIN_TOKEN, CUSTOMER_TOKEN, OTHER_TOKEN, auth


@pytest.fixture
def place_order(db, seed):
    counter = {"n": 0}

    async def place(user_id="cust-1", quantity=1, table_id=None):
        counter["n"] += 1
        await ensure_profile(db, user_id, f"{user_id}@brew.test")
        lines = [
            CartLine(seed.latte.id, "Latte", Decimal("100"), quantity),
            CartLine(seed.sandwich.id, "Sandwich", Decimal("150"), 1),
        ]
        return await create_paid_order(
            db,
            user_id=user_id,
            table_id=table_id,
            coupon_id=None,
            lines=lines,
            pricing=calculate_pricing(lines),
            payment_id=f"pay_{counter['n']}",
        )

    return place


async def advance(client, order_id):
    return await client.post(f"/admin/orders/{order_id}/advance", headers=auth(ADMIN_TOKEN))


async def test_admin_routes_require_admin(client, seed, place_order):
    order = await place_order()

    anonymous = await client.get("/admin/orders/")
    customer = await client.post(f"/admin/orders/{order.id}/advance", headers=auth(CUSTOMER_TOKEN))

    assert anonymous.status_code == 401
    assert customer.status_code == 403
    assert customer.json()["error"] == "Admin access required"


async def test_advance_walks_the_lifecycle(client, seed, place_order, events):
    order = await place_order(table_id=seed.table.id)
    queue = events.subscribe()

    seen = []
    for _ in range(4):
        resp = await advance(client, order.id)
        assert resp.status_code == 200
        data = resp.json()
        seen.append((data["previous_status"], data["order"]["status"], data["changed"]))

    assert seen == [
        ("pending", "preparing", True),
        ("preparing", "ready", True),
        ("ready", "served", True),
        ("served", "served", False),
    ]
    assert data["order"]["table_number"] == 4
    assert queue.qsize() == 3
    assert queue.get_nowait() == {"event": "UPDATE", "table": "orders", "order_id": order.id}


async def test_advance_unknown_order(client, seed):
    resp = await advance(client, 999)
    assert resp.status_code == 404


async def test_admin_order_listing_and_detail(client, seed, place_order):
    first = await place_order(quantity=2)
    await place_order(user_id="cust-2")
    await advance(client, first.id)

    listing = await client.get("/admin/orders/", headers=auth(ADMIN_TOKEN))
    preparing = await client.get("/admin/orders/?status=preparing", headers=auth(ADMIN_TOKEN))
    detail = await client.get(f"/admin/orders/{first.id}", headers=auth(ADMIN_TOKEN))

    assert len(listing.json()) == 2
    assert [o["id"] for o in preparing.json()] == [first.id]
    body = detail.json()
    assert body["count_items"] == 3
    assert body["customer_name"] == "cust-1"
    assert Decimal(str(body["total"])) == Decimal("367.5")
    assert {i["menu_item_name"] for i in body["items"]} == {"Latte", "Sandwich"}


async def test_delete_removes_order_and_items(client, seed, place_order, session_factory, events):
    order = await place_order()
    queue = events.subscribe()

    resp = await client.delete(f"/admin/orders/{order.id}", headers=auth(ADMIN_TOKEN))

    assert resp.status_code == 204
    async with session_factory() as session:
        assert (await session.execute(select(func.count()).select_from(Order))).scalar() == 0
        assert (await session.execute(select(func.count()).select_from(OrderItem))).scalar() == 0
    assert queue.get_nowait() == {"event": "DELETE", "table": "orders", "order_id": order.id}

    again = await client.delete(f"/admin/orders/{order.id}", headers=auth(ADMIN_TOKEN))
    assert again.status_code == 404


async def test_my_orders_split_active_and_past(client, seed, place_order):
    active = await place_order()
    done = await place_order()
    await place_order(user_id="cust-2")
    for _ in range(3):
        await advance(client, done.id)

    resp = await client.get("/orders/mine", headers=auth(CUSTOMER_TOKEN))

    assert resp.status_code == 200
    data = resp.json()
    assert [o["id"] for o in data["active"]] == [active.id]
    assert [o["id"] for o in data["past"]] == [done.id]


async def test_customer_sees_only_own_order(client, seed, place_order):
    order = await place_order()

    mine = await client.get(f"/orders/{order.id}", headers=auth(CUSTOMER_TOKEN))
    theirs = await client.get(f"/orders/{order.id}", headers=auth(OTHER_TOKEN))

    assert mine.status_code == 200
    assert mine.json()["order_number"] == order.order_number
    assert theirs.status_code == 404


async def test_display_shows_preparing_and_ready(client, seed, place_order):
    pending = await place_order()
    preparing = await place_order()
    ready = await place_order()
    await advance(client, preparing.id)
    await advance(client, ready.id)
    await advance(client, ready.id)

    resp = await client.get("/orders/display")

    ids = {o["id"]: o["status"] for o in resp.json()}
    assert ids == {preparing.id: "preparing", ready.id: "ready"}
    assert pending.id not in ids


async def test_stats(client, seed, place_order):
    first = await place_order(quantity=3)
    await place_order(user_id="cust-2")
    for _ in range(3):
        await advance(client, first.id)

    summary = (await client.get("/admin/stats/summary", headers=auth(ADMIN_TOKEN))).json()
    top = (await client.get("/admin/stats/top-items?limit=1", headers=auth(ADMIN_TOKEN))).json()

    assert summary["active_orders"] == 1
    assert summary["by_status"] == {"pending": 1, "preparing": 0, "ready": 0, "served": 1}
    assert top == {"top_items": [{"menu_item_id": seed.latte.id, "menu_item_name": "Latte", "total_sold": 4}]}
