import json

import pytest

RECEIPT = ("receipt.png", b"\x89PNG fake receipt", "image/png")


@pytest.fixture
def tee(client, admin_headers):
    response = client.post(
        "/api/merchandise",
        json={
            "name": "Choir Tee",
            "description": "Black tee with the choir crest",
            "price": 1500,
            "sizes": ["S", "M", "L"],
            "category": "tshirt",
            "stock": 40,
        },
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def place_order(client, headers, items, receipt=RECEIPT):
    files = {"receipt": receipt} if receipt else None
    return client.post("/api/orders", data={"items": json.dumps(items)}, files=files, headers=headers)


def test_members_cannot_create_merchandise(client, make_member):
    _, headers = make_member()

    response = client.post(
        "/api/merchandise",
        json={"name": "Band", "description": "Wrist band", "price": 300, "sizes": ["One Size"], "category": "band"},
        headers=headers,
    )

    assert response.status_code == 403


def test_merchandise_rejects_unknown_sizes(client, admin_headers):
    response = client.post(
        "/api/merchandise",
        json={"name": "Hoodie", "description": "Warm", "price": 4000, "sizes": ["XXXL"], "category": "hoodie"},
        headers=admin_headers,
    )

    assert response.status_code == 400


def test_order_is_priced_from_the_catalogue(client, make_member, tee, blob_store):
    _, headers = make_member()

    response = place_order(
        client, headers, [{"merchandiseId": tee["id"], "size": "M", "quantity": 2, "price": 1}]
    )

    assert response.status_code == 201, response.text
    order = response.json()["data"]
    assert order["status"] == "pending"
    assert order["totalAmount"] == 3000
    assert order["items"][0]["name"] == "Choir Tee"
    assert order["receiptUrl"].startswith("https://blobs.test/receipts/")
    assert len(blob_store.blobs) == 1


def test_order_validation(client, make_member, tee):
    _, headers = make_member()
    item = {"merchandiseId": tee["id"], "size": "M", "quantity": 1}

    assert place_order(client, headers, [item], receipt=None).status_code == 400
    assert place_order(client, headers, []).status_code == 400
    assert place_order(client, headers, [{**item, "size": "XL"}]).status_code == 400
    assert place_order(client, headers, [{**item, "merchandiseId": 999}]).status_code == 404
    bad_type = place_order(client, headers, [item], receipt=("receipt.exe", b"MZ", "application/x-msdownload"))
    assert bad_type.status_code == 400


def test_confirm_and_decline_are_terminal(client, make_member, admin_headers, tee):
    _, headers = make_member()
    item = {"merchandiseId": tee["id"], "size": "L", "quantity": 1}
    first = place_order(client, headers, [item]).json()["data"]
    second = place_order(client, headers, [item]).json()["data"]

    confirmed = client.put(f"/api/orders/{first['id']}/confirm", headers=admin_headers)
    assert confirmed.status_code == 200
    assert confirmed.json()["data"]["status"] == "confirmed"
    assert confirmed.json()["data"]["verifiedBy"] is not None

    no_reason = client.put(f"/api/orders/{second['id']}/decline", json={"reason": ""}, headers=admin_headers)
    assert no_reason.status_code == 400
    declined = client.put(
        f"/api/orders/{second['id']}/decline", json={"reason": "Receipt amount mismatch"}, headers=admin_headers
    )
    assert declined.json()["data"]["declineReason"] == "Receipt amount mismatch"

    again = client.put(f"/api/orders/{first['id']}/decline", json={"reason": "late"}, headers=admin_headers)
    assert again.status_code == 400
    assert again.json()["detail"] == "Order is already confirmed."

    stats = client.get("/api/orders/stats/summary", headers=admin_headers).json()["data"]
    assert stats == {
        "totalOrders": 2,
        "pendingOrders": 0,
        "confirmedOrders": 1,
        "declinedOrders": 1,
        "totalRevenue": 1500,
    }


def test_members_only_review_their_own_orders(client, make_member, tee):
    _, alice = make_member()
    _, bob = make_member()
    order = place_order(client, alice, [{"merchandiseId": tee["id"], "size": "S", "quantity": 1}]).json()["data"]

    assert client.get(f"/api/orders/{order['id']}", headers=bob).status_code == 403
    assert client.put(f"/api/orders/{order['id']}/confirm", headers=alice).status_code == 403
    assert client.get("/api/orders/my-orders", headers=bob).json()["count"] == 0
    assert client.get("/api/orders/my-orders", headers=alice).json()["count"] == 1


def test_owner_may_delete_only_pending_orders(client, make_member, admin_headers, tee):
    _, headers = make_member()
    item = {"merchandiseId": tee["id"], "size": "S", "quantity": 1}
    pending = place_order(client, headers, [item]).json()["data"]
    settled = place_order(client, headers, [item]).json()["data"]
    client.put(f"/api/orders/{settled['id']}/confirm", headers=admin_headers)

    assert client.delete(f"/api/orders/{settled['id']}", headers=headers).status_code == 400
    assert client.delete(f"/api/orders/{pending['id']}", headers=headers).status_code == 200
    assert client.get(f"/api/orders/{pending['id']}", headers=headers).status_code == 404


def test_order_listing_filters(client, make_member, admin_headers, tee):
    _, headers = make_member()
    item = {"merchandiseId": tee["id"], "size": "S", "quantity": 1}
    order = place_order(client, headers, [item]).json()["data"]
    place_order(client, headers, [item])
    client.put(f"/api/orders/{order['id']}/confirm", headers=admin_headers)

    confirmed = client.get("/api/orders", params={"status": "confirmed"}, headers=admin_headers).json()
    assert [o["id"] for o in confirmed["data"]] == [order["id"]]
    recent = client.get("/api/orders", params={"period": "week", "category": "tshirt"}, headers=admin_headers)
    assert recent.json()["count"] == 2
    hoodies = client.get("/api/orders", params={"category": "hoodie"}, headers=admin_headers)
    assert hoodies.json()["count"] == 0
