from bson import ObjectId

from freshsip.core.security import create_access_token
from tests.factories import TOMORROW, day_doc, freshplan_doc, quicksip_doc, user_doc


def test_root_and_security_headers(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["name"] == "FreshSip Delivery"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert "X-Request-ID" in response.headers
    assert "X-Process-Time" in response.headers


def test_request_id_is_propagated(client):
    response = client.get("/", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"


def test_missing_token_is_unauthorized(client):
    response = client.get("/api/chef/pending-orders")
    assert response.status_code == 401
    assert response.json() == {"error": "Authentication required"}


def test_bad_token_is_unauthorized(client):
    response = client.get("/api/chef/pending-orders", headers={"Authorization": "Bearer nonsense"})
    assert response.status_code == 401


def test_cookie_token_is_accepted(client, settings, users):
    chef = user_doc(role="chef")
    users.add(chef)
    token = create_access_token({"userId": str(chef["_id"]), "role": "chef"}, settings)
    client.cookies.set(settings.AUTH_COOKIE_NAME, token)

    response = client.get("/api/chef/pending-orders")

    assert response.status_code == 200


def test_chef_route_rejects_other_roles(client, users, auth_headers):
    courier = user_doc(role="delivery")
    users.add(courier)

    response = client.get("/api/chef/pending-orders", headers=auth_headers(courier))

    assert response.status_code == 403
    assert response.json() == {"error": "Unauthorized. Chef access required."}


def test_delivery_route_rejects_chefs(client, users, auth_headers):
    chef = user_doc(role="chef")
    users.add(chef)

    response = client.post("/api/delivery/orders", json={"hour": 17, "minutes": 35}, headers=auth_headers(chef))

    assert response.status_code == 403
    assert response.json() == {"error": "Unauthorized. Delivery access required."}


def test_update_item_status_flow(client, orders, users, auth_headers):
    chef = user_doc(role="chef")
    users.add(chef)
    document = quicksip_doc()
    orders.add(document)

    response = client.post(
        "/api/chef/update-item-status",
        json={"orderId": str(document["_id"]), "status": "received"},
        headers=auth_headers(chef),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["status"] == "received"
    assert body["orderNumber"] == str(document["_id"])[-6:].upper()

    listing = client.get("/api/chef/received-orders", headers=auth_headers(chef)).json()
    assert [item["orderId"] for item in listing["items"]] == [str(document["_id"])]
    assert listing["date"] == "2025-06-10"


def test_update_item_status_with_legacy_item_id(client, orders, users, auth_headers):
    chef = user_doc(role="chef")
    users.add(chef)
    day = day_doc()
    document = freshplan_doc([day, day_doc(date=TOMORROW)])
    orders.add(document)
    item_id = f"{document['_id']}-{day['_id']}-{day['items'][0]['_id']}"

    response = client.post(
        "/api/chef/update-item-status",
        json={"itemId": item_id, "status": "done"},
        headers=auth_headers(chef),
    )

    assert response.status_code == 200
    assert response.json()["dayId"] == str(day["_id"])
    days = orders.raw(document["_id"])["planRelated"]["daySchedule"]
    assert [d["status"] for d in days] == ["done", "pending"]


def test_update_item_status_invalid_status(client, orders, users, auth_headers):
    chef = user_doc(role="chef")
    users.add(chef)
    document = quicksip_doc()
    orders.add(document)

    response = client.post(
        "/api/chef/update-item-status",
        json={"orderId": str(document["_id"]), "status": "cooking"},
        headers=auth_headers(chef),
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid status. Must be received or done"}


def test_update_item_status_requires_an_id(client, users, auth_headers):
    chef = user_doc(role="chef")
    users.add(chef)

    response = client.post("/api/chef/update-item-status", json={"status": "done"}, headers=auth_headers(chef))

    assert response.status_code == 400
    assert response.json() == {"error": "Order ID and status are required"}


def test_unknown_order_is_not_found(client, users, auth_headers):
    courier = user_doc(role="delivery")
    users.add(courier)

    response = client.post(
        "/api/delivery/update-status",
        json={"orderId": str(ObjectId()), "status": "picked"},
        headers=auth_headers(courier),
    )

    assert response.status_code == 404
    assert response.json() == {"error": "Order not found"}


def test_eligible_orders_endpoint(client, orders, users, auth_headers):
    courier = user_doc(role="delivery", time_slots=["6-7 PM"])
    users.add(courier)
    document = quicksip_doc(time_slot="6-7 PM")
    orders.add(document)

    response = client.post("/api/delivery/orders", json={"hour": 17, "minutes": 35}, headers=auth_headers(courier))

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["targetTimeSlot"] == "6-7 PM"
    assert [row["orderId"] for row in body["orders"]] == [str(document["_id"])]


def test_eligible_orders_not_active(client, users, auth_headers):
    courier = user_doc(role="delivery", time_slots=["7-8 AM"])
    users.add(courier)

    response = client.post("/api/delivery/orders", json={"hour": 17, "minutes": 10}, headers=auth_headers(courier))

    assert response.status_code == 403
    body = response.json()
    assert body["error"] == "You are not active for this time slot."
    assert body["targetTimeSlot"] == "5-6 PM"
    assert body["yourActiveSlots"] == ["7-8 AM"]
    assert len(body["availableSlots"]) == 8


def test_eligible_orders_no_slot(client, users, auth_headers):
    courier = user_doc(role="delivery", time_slots=["6-7 PM"])
    users.add(courier)

    response = client.post("/api/delivery/orders", json={"hour": 13, "minutes": 0}, headers=auth_headers(courier))

    assert response.status_code == 400
    assert response.json() == {"error": "No delivery slot available for this time."}


def test_eligible_orders_rejects_out_of_range_time(client, users, auth_headers):
    courier = user_doc(role="delivery", time_slots=["6-7 PM"])
    users.add(courier)

    response = client.post("/api/delivery/orders", json={"hour": 25, "minutes": 0}, headers=auth_headers(courier))

    assert response.status_code == 400
    assert "error" in response.json()


def test_delivery_and_payment_flow(client, orders, users, auth_headers):
    courier = user_doc(role="delivery")
    users.add(courier)
    document = quicksip_doc(status="done")
    orders.add(document)
    order_id = str(document["_id"])

    for status in ("picked", "delivered"):
        response = client.post(
            "/api/delivery/update-status",
            json={"orderId": order_id, "status": status},
            headers=auth_headers(courier),
        )
        assert response.status_code == 200

    delivered = client.get("/api/delivery/delivered-orders", headers=auth_headers(courier)).json()
    assert [row["orderId"] for row in delivered["orders"]] == [order_id]

    response = client.post("/api/delivery/confirm-payment", json={"orderId": order_id}, headers=auth_headers(courier))
    assert response.status_code == 200
    assert response.json()["paymentStatus"] == "completed"

    response = client.post("/api/delivery/confirm-payment", json={"orderId": order_id}, headers=auth_headers(courier))
    assert response.status_code == 400
    assert response.json() == {"error": "Payment already completed"}


def test_first_day_payment_rule_over_http(client, orders, users, auth_headers):
    courier = user_doc(role="delivery")
    users.add(courier)
    first = day_doc(status="delivered")
    second = day_doc(date=TOMORROW, status="delivered")
    document = freshplan_doc([first, second])
    orders.add(document)

    response = client.post(
        "/api/delivery/confirm-payment",
        json={"orderId": str(document["_id"]), "dayId": str(second["_id"])},
        headers=auth_headers(courier),
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Payment can only be collected on the first delivery day"}


def test_active_slots_endpoints(client, users, auth_headers):
    courier = user_doc(role="delivery")
    users.add(courier)

    response = client.post(
        "/api/delivery/active",
        json={"isActive": True, "timeSlots": ["5-6 PM"]},
        headers=auth_headers(courier),
    )
    assert response.status_code == 200
    assert response.json()["deliveryActiveInfo"]["timeSlots"] == ["5-6 PM"]

    response = client.get("/api/delivery/active", headers=auth_headers(courier))
    assert response.json()["deliveryActiveInfo"]["timeSlots"] == ["5-6 PM"]

    response = client.post(
        "/api/delivery/active",
        json={"isActive": True, "timeSlots": ["Midnight"]},
        headers=auth_headers(courier),
    )
    assert response.status_code == 400
    assert len(response.json()["validTimeSlots"]) == 8


def test_cancel_endpoint(client, orders, users, auth_headers):
    admin = user_doc(role="admin")
    customer = user_doc(role="customer")
    users.add(admin)
    users.add(customer)
    document = quicksip_doc()
    orders.add(document)
    payload = {"orderId": str(document["_id"]), "reason": "Duplicate", "cancelledBy": "admin"}

    response = client.post("/api/orders/cancel", json=payload, headers=auth_headers(customer))
    assert response.status_code == 403

    response = client.post("/api/orders/cancel", json=payload, headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

    response = client.post("/api/orders/cancel", json=payload, headers=auth_headers(admin))
    assert response.status_code == 400
    assert response.json() == {"error": "Order is already cancelled"}


def test_stale_write_is_conflict(client, orders, users, auth_headers, monkeypatch):
    chef = user_doc(role="chef")
    users.add(chef)
    document = quicksip_doc()
    orders.add(document)

    original_get = orders.get

    def get_then_race(order_id):
        order = original_get(order_id)
        # Another request saves between our load and our save
        orders.raw(order_id)["version"] = 7
        return order

    monkeypatch.setattr(orders, "get", get_then_race)

    response = client.post(
        "/api/chef/update-item-status",
        json={"orderId": str(document["_id"]), "status": "received"},
        headers=auth_headers(chef),
    )

    assert response.status_code == 409
    assert "error" in response.json()


def test_chef_stats_endpoint(client, orders, users, auth_headers):
    chef = user_doc(role="chef")
    users.add(chef)
    orders.add(quicksip_doc())

    response = client.get("/api/chef/stats?date=2025-06-10", headers=auth_headers(chef))

    assert response.status_code == 200
    assert response.json()["stats"]["pendingOrders"] == 1


def test_bad_date_is_rejected(client, users, auth_headers):
    chef = user_doc(role="chef")
    users.add(chef)

    response = client.get("/api/chef/pending-orders?date=tomorrow-ish", headers=auth_headers(chef))

    assert response.status_code == 400


def test_today_and_tomorrow_production_endpoints(client, orders, users, auth_headers):
    chef = user_doc(role="chef")
    users.add(chef)
    today = quicksip_doc(status="done")
    tomorrow_day = day_doc(date=TOMORROW)
    orders.add(today)
    orders.add(freshplan_doc([tomorrow_day]))
    orders.add(quicksip_doc(status="cancelled"))

    body = client.get("/api/chef/today-orders", headers=auth_headers(chef)).json()
    assert body["date"] == "2025-06-10"
    assert [item["orderId"] for item in body["items"]] == [str(today["_id"])]

    body = client.get("/api/chef/tomorrow-orders", headers=auth_headers(chef)).json()
    assert body["date"] == "2025-06-11"
    assert [item["dayId"] for item in body["items"]] == [str(tomorrow_day["_id"])]


def test_edit_delivery_slot_endpoint(client, orders, users, auth_headers):
    customer = user_doc(role="customer")
    users.add(customer)
    day = day_doc()
    document = freshplan_doc([day], user=customer["_id"])
    orders.add(document)
    payload = {"orderId": str(document["_id"]), "dayId": str(day["_id"]), "timeSlot": "4-5 PM"}

    response = client.put("/api/freshplan/edit-delivery", json=payload, headers=auth_headers(customer))

    assert response.status_code == 200
    body = response.json()
    assert body["timeSlot"] == "4-5 PM"
    assert body["dayId"] == str(day["_id"])

    stranger = user_doc(role="customer")
    users.add(stranger)
    response = client.put("/api/freshplan/edit-delivery", json=payload, headers=auth_headers(stranger))
    assert response.status_code == 404
    assert response.json() == {"error": "Order not found or cannot be modified"}


def test_edit_delivery_slot_requires_time_slot(client, users, auth_headers):
    customer = user_doc(role="customer")
    users.add(customer)

    response = client.put(
        "/api/freshplan/edit-delivery",
        json={"orderId": str(ObjectId()), "dayId": str(ObjectId())},
        headers=auth_headers(customer),
    )

    assert response.status_code == 400
    assert "error" in response.json()
