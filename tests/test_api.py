from datetime import date, timedelta
from decimal import Decimal

from hydroscan.services.hydrocoin_ledger import HydroCoinLedger

ALKALINE_20 = {"category": "Refill", "water_type": "Alkaline", "uom": "20L", "quantity": 2}
MINERAL_10 = {"category": "Refill", "water_type": "Mineral", "uom": "10L", "quantity": 1}


def money(value) -> Decimal:
    return Decimal(str(value))


def submit(client, headers, **body):
    return client.post("/orders/", json=body, headers=headers)


def grant_coins(session_factory, headers, amount):
    db = session_factory()
    try:
        HydroCoinLedger(db).credit(headers["X-User-Id"], amount)
    finally:
        db.close()


class TestHealthAndUsers:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_create_and_get_user(self, client):
        resp = client.post("/users/", json={"id": "user-1", "full_name": "Juan Dela Cruz"})
        assert resp.status_code == 200

        resp = client.get("/users/user-1")
        assert resp.status_code == 200
        assert resp.json()["full_name"] == "Juan Dela Cruz"

    def test_unknown_user(self, client):
        assert client.get("/users/ghost").status_code == 404


class TestCart:
    def test_requires_user_header(self, client):
        resp = client.get("/cart/")
        assert resp.status_code == 401
        assert resp.json()["detail"] == "User not logged in"

    def test_add_merge_and_total(self, client, auth_headers):
        client.post("/cart/items", json=ALKALINE_20, headers=auth_headers)
        resp = client.post("/cart/items", json=ALKALINE_20, headers=auth_headers)

        assert resp.status_code == 200
        body = resp.json()
        assert len(body["items"]) == 1
        assert body["items"][0]["quantity"] == 4
        assert money(body["total"]) == Decimal("200.00")

    def test_invalid_quantity(self, client, auth_headers):
        resp = client.post("/cart/items", json={**ALKALINE_20, "quantity": 0}, headers=auth_headers)
        assert resp.status_code == 400

    def test_refill_without_uom(self, client, auth_headers):
        resp = client.post("/cart/items", json={"category": "Refill", "quantity": 1}, headers=auth_headers)
        assert resp.status_code == 400

    def test_unpriced_uom_rejected(self, client, auth_headers):
        item = {"category": "Refill", "water_type": "Mineral", "uom": "5L", "quantity": 1}
        resp = client.post("/cart/items", json=item, headers=auth_headers)
        assert resp.status_code == 400
        assert client.get("/cart/", headers=auth_headers).json()["items"] == []

    def test_update_remove_clear(self, client, auth_headers):
        item_id = client.post("/cart/items", json=ALKALINE_20, headers=auth_headers).json()["items"][0]["id"]

        resp = client.patch(f"/cart/items/{item_id}", json={"quantity": 5}, headers=auth_headers)
        assert resp.json()["items"][0]["quantity"] == 5

        assert client.patch(f"/cart/items/{item_id}", json={"quantity": 0}, headers=auth_headers).status_code == 400
        assert client.delete(f"/cart/items/{item_id}", headers={"X-User-Id": "user-2"}).status_code == 404

        resp = client.delete(f"/cart/items/{item_id}", headers=auth_headers)
        assert resp.json()["items"] == []

        client.post("/cart/items", json=MINERAL_10, headers=auth_headers)
        assert client.delete("/cart/", headers=auth_headers).json()["items"] == []

    def test_discount_preview(self, client, auth_headers, session_factory):
        client.post("/cart/items", json=ALKALINE_20, headers=auth_headers)
        client.post("/cart/items", json=MINERAL_10, headers=auth_headers)
        grant_coins(session_factory, auth_headers, 10)

        body = client.get("/cart/discount", headers=auth_headers).json()
        assert money(body["total"]) == Decimal("115.00")
        assert money(body["discounted_total"]) == Decimal("105.00")
        assert body["coins_consumed"] == 10
        # preview only
        assert body["balance"] == 10


class TestOrders:
    def test_submit_with_hydrocoins(self, client, auth_headers, session_factory):
        client.post("/cart/items", json=ALKALINE_20, headers=auth_headers)
        client.post("/cart/items", json=MINERAL_10, headers=auth_headers)
        grant_coins(session_factory, auth_headers, 10)

        resp = submit(client, auth_headers, use_hydrocoins=True)
        assert resp.status_code == 201
        order = resp.json()
        assert order["order_number"] == "ORD-000001"
        assert money(order["total_amount"]) == Decimal("105.00")
        assert order["coins_used"] == 10
        assert order["status"] == "Processing"
        assert order["status_label"] == "Pending"
        assert len(order["items"]) == 2

        assert client.get("/hydrocoins/", headers=auth_headers).json()["balance"] == 0
        assert client.get("/cart/", headers=auth_headers).json()["items"] == []

    def test_empty_cart(self, client, auth_headers):
        resp = submit(client, auth_headers)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Cart is empty"

    def test_pickup_today_rejected(self, client, auth_headers):
        client.post("/cart/items", json=MINERAL_10, headers=auth_headers)
        resp = submit(client, auth_headers, pickup_date=date.today().isoformat())
        assert resp.status_code == 400

    def test_scheduled_order(self, client, auth_headers):
        client.post("/cart/items", json=MINERAL_10, headers=auth_headers)
        pickup = date.today() + timedelta(days=1)
        while pickup.weekday() in (2, 6):
            pickup += timedelta(days=1)

        resp = submit(client, auth_headers, pickup_date=pickup.isoformat())
        assert resp.status_code == 201
        assert resp.json()["is_scheduled"] is True

    def test_status_lifecycle(self, client, auth_headers):
        client.post("/cart/items", json=MINERAL_10, headers=auth_headers)
        order_id = submit(client, auth_headers).json()["id"]

        resp = client.post(f"/orders/{order_id}/status", json={"status": "Delivered"}, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["delivered_at"] is not None

        assert client.post(f"/orders/{order_id}/cancel", headers=auth_headers).status_code == 409

        resp = client.post(f"/orders/{order_id}/status", json={"status": "Processing"}, headers=auth_headers)
        assert resp.json()["status"] == "Processing"

        resp = client.post(f"/orders/{order_id}/cancel", headers=auth_headers)
        assert resp.json()["status"] == "Cancelled"

        resp = client.post(f"/orders/{order_id}/payment", json={"is_paid": True}, headers=auth_headers)
        assert resp.status_code == 409

    def test_cancel_goes_through_lifecycle_rules(self, client, auth_headers):
        client.post("/cart/items", json=MINERAL_10, headers=auth_headers)
        order_id = submit(client, auth_headers).json()["id"]

        assert client.post(f"/orders/{order_id}/cancel", headers=auth_headers).json()["status"] == "Cancelled"
        assert client.post(f"/orders/{order_id}/cancel", headers=auth_headers).status_code == 409
        assert client.post("/orders/999/cancel", headers=auth_headers).status_code == 404

    def test_unknown_status(self, client, auth_headers):
        client.post("/cart/items", json=MINERAL_10, headers=auth_headers)
        order_id = submit(client, auth_headers).json()["id"]
        resp = client.post(f"/orders/{order_id}/status", json={"status": "Shipped"}, headers=auth_headers)
        assert resp.status_code == 400

    def test_complete(self, client, auth_headers):
        client.post("/cart/items", json=MINERAL_10, headers=auth_headers)
        order_id = submit(client, auth_headers).json()["id"]

        body = client.post(f"/orders/{order_id}/complete", headers=auth_headers).json()
        assert body["is_paid"] is True
        assert body["status"] == "Delivered"

    def test_list_and_get(self, client, auth_headers):
        client.post("/cart/items", json=MINERAL_10, headers=auth_headers)
        order_id = submit(client, auth_headers).json()["id"]

        assert [o["id"] for o in client.get("/orders/", headers=auth_headers).json()] == [order_id]
        assert client.get("/orders/?status=Cancelled", headers=auth_headers).json() == []
        assert client.get(f"/orders/{order_id}", headers=auth_headers).status_code == 200
        assert client.get(f"/orders/{order_id}", headers={"X-User-Id": "user-2"}).status_code == 404
        assert client.get("/orders/999", headers=auth_headers).status_code == 404

    def test_export(self, client, auth_headers):
        client.post("/cart/items", json=ALKALINE_20, headers=auth_headers)
        submit(client, auth_headers)
        today = date.today().isoformat()

        resp = client.get(f"/orders/export?start={today}&end={today}", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert "Self,Alkaline,20L,2,100.00" in resp.text
        assert "Total UOM:,40" in resp.text

    def test_export_reversed_range(self, client, auth_headers):
        resp = client.get("/orders/export?start=2024-06-04&end=2024-06-03", headers=auth_headers)
        assert resp.status_code == 400


class TestInventory:
    def test_set_adjust_and_list(self, client, auth_headers):
        resp = client.put("/inventory/mineral_20l", json={"quantity": 5}, headers=auth_headers)
        assert resp.json() == {"key": "mineral_20l", "previous": 0, "quantity": 5, "low_stock": False}

        resp = client.post("/inventory/mineral_20l/adjust", json={"delta": -3}, headers=auth_headers)
        assert resp.json()["quantity"] == 2

        resp = client.post("/inventory/mineral_20l/adjust", json={"delta": -10}, headers=auth_headers)
        assert resp.json()["quantity"] == 0
        assert resp.json()["low_stock"] is True

        assert client.get("/inventory/", headers=auth_headers).json() == [{"key": "mineral_20l", "quantity": 0}]
        assert client.get("/inventory/slim_gallon", headers=auth_headers).json() == {"key": "slim_gallon", "quantity": 0}

    def test_negative_set_rejected(self, client, auth_headers):
        assert client.put("/inventory/mineral_20l", json={"quantity": -1}, headers=auth_headers).status_code == 400

    def test_requires_user(self, client, auth_headers):
        client.put("/inventory/mineral_20l", json={"quantity": 5}, headers=auth_headers)

        assert client.put("/inventory/mineral_20l", json={"quantity": 0}).status_code == 401
        assert client.post("/inventory/mineral_20l/adjust", json={"delta": -5}).status_code == 401
        assert client.get("/inventory/").status_code == 401
        assert client.get("/inventory/mineral_20l").status_code == 401

        assert client.get("/inventory/mineral_20l", headers=auth_headers).json()["quantity"] == 5


class TestHydroCoins:
    def test_debit(self, client, auth_headers, session_factory):
        grant_coins(session_factory, auth_headers, 5)
        assert client.get("/hydrocoins/", headers=auth_headers).json()["balance"] == 5

        resp = client.post("/hydrocoins/debit", json={"amount": 6}, headers=auth_headers)
        assert resp.json() == {"success": False, "balance": 5}

        resp = client.post("/hydrocoins/debit", json={"amount": 5}, headers=auth_headers)
        assert resp.json() == {"success": True, "balance": 0}

    def test_no_self_service_credit(self, client, auth_headers):
        resp = client.post("/hydrocoins/credit", json={"amount": 1000}, headers=auth_headers)
        assert resp.status_code in (404, 405)
        assert client.get("/hydrocoins/", headers=auth_headers).json()["balance"] == 0

    def test_requires_user(self, client):
        assert client.get("/hydrocoins/").status_code == 401


class TestSummaries:
    def test_process_and_fetch(self, client, auth_headers):
        client.post("/cart/items", json=ALKALINE_20, headers=auth_headers)
        submit(client, auth_headers)
        today = date.today().isoformat()

        assert client.get(f"/summaries/{today}", headers=auth_headers).status_code == 404

        resp = client.post(f"/summaries/{today}", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["total_units"] == 40
        assert money(resp.json()["total_revenue"]) == Decimal("100.00")

        # already stored
        assert client.post(f"/summaries/{today}", headers=auth_headers).json() is None
        assert client.post(f"/summaries/{today}?force=true", headers=auth_headers).json()["total_orders"] == 1

        assert len(client.get("/summaries/", headers=auth_headers).json()) == 1
        assert client.get(f"/summaries/{today}", headers=auth_headers).json()["source_orders"] == ["ORD-000001"]

    def test_sales_report(self, client, auth_headers):
        client.post("/cart/items", json=ALKALINE_20, headers=auth_headers)
        submit(client, auth_headers)
        today = date.today()

        resp = client.get(f"/summaries/report?period=Week&anchor={today.isoformat()}", headers=auth_headers)
        assert resp.status_code == 200
        report = resp.json()
        assert report["period"] == "Week"
        assert date.fromisoformat(report["start"]) <= today <= date.fromisoformat(report["end"])
        assert money(report["total_revenue"]) == Decimal("100.00")
        assert report["total_quantity"] == 2
        assert report["total_uom"] == 40
        assert report["most_ordered_water_type"] == "Alkaline"
        assert report["top_customer"] == "Self"
        assert report["unpaid_orders"] == 1
        assert report["unpaid_customers"] == ["Self"]
        assert report["peak_quantity"] == {"label": today.strftime("%A"), "value": 2}
        assert money(report["peak_revenue"]["amount"]) == Decimal("100.00")

    def test_sales_report_empty_period(self, client, auth_headers):
        resp = client.get("/summaries/report?period=Year&anchor=2001-05-05", headers=auth_headers)
        report = resp.json()
        assert (report["start"], report["end"]) == ("2001-01-01", "2001-12-31")
        assert report["total_orders"] == 0
        assert report["top_customer"] is None
        assert report["peak_quantity"] is None

    def test_sales_report_bad_period(self, client, auth_headers):
        assert client.get("/summaries/report?period=Decade", headers=auth_headers).status_code == 422
        assert client.get("/summaries/report").status_code == 401

    def test_rollover_and_pending(self, client, auth_headers):
        client.post("/cart/items", json=ALKALINE_20, headers=auth_headers)
        submit(client, auth_headers)
        today = date.today()
        tomorrow = (today + timedelta(days=1)).isoformat()

        assert client.post("/summaries/rollover", json={"today": today.isoformat()}, headers=auth_headers).json() is None
        resp = client.post("/summaries/rollover", json={"today": tomorrow}, headers=auth_headers)
        assert resp.json()["date"] == today.isoformat()

        assert client.post("/summaries/pending", json={"today": tomorrow}, headers=auth_headers).json() == []


class TestScans:
    def test_payload_preview_and_order(self, client, auth_headers):
        resp = client.post(
            "/scans/payload",
            json={"name": "Juan", "address": "Purok 1", "unit": "20L Slim", "water_type": "Alkaline"},
        )
        raw = resp.json()["payload"]
        assert raw == "name=Juan;address=Purok 1;unit=20L Slim;type=Alkaline"

        preview = client.post("/scans/preview", json={"payload": raw}).json()
        assert preview == {"name": "Juan", "address": "Purok 1", "unit": "20L Slim", "water_type": "Alkaline"}

        resp = client.post("/scans/orders", json={"payload": raw, "quantity": 2}, headers=auth_headers)
        assert resp.status_code == 201
        assert resp.json()["is_paid"] is True
        assert money(resp.json()["total_amount"]) == Decimal("100.00")

    def test_payload_rejects_separators(self, client):
        resp = client.post("/scans/payload", json={"name": "a;b", "address": "x", "unit": "20L"})
        assert resp.status_code == 400

    def test_unpriced_unit_rejected(self, client, auth_headers):
        resp = client.post("/scans/orders", json={"payload": "name=Ana;unit=5L;type=M"}, headers=auth_headers)
        assert resp.status_code == 400
        assert client.get("/orders/", headers=auth_headers).json() == []

    def test_incomplete_label(self, client, auth_headers):
        resp = client.post("/scans/orders", json={"payload": "unit=20L"}, headers=auth_headers)
        assert resp.status_code == 400
