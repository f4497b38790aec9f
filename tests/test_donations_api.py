import re

from faker import Faker

fake = Faker()


def donate(client, headers=None, **overrides):
    body = {"donorName": fake.name(), "donorEmail": fake.email().upper(), "amount": 25, **overrides}
    return client.post("/api/donations", json=body, headers=headers or {})


def test_public_donation_gets_defaults_and_a_transaction_id(client):
    response = donate(client)

    assert response.status_code == 201
    donation = response.json()["data"]
    assert donation["status"] == "pending"
    assert donation["currency"] == "USD"
    assert donation["tier"] == "supporter"
    assert donation["paymentMethod"] == "credit_card"
    assert donation["donorEmail"] == donation["donorEmail"].lower()
    assert donation["memberId"] is None
    assert re.fullmatch(r"TXN_\d+_[A-Z0-9]{9}", donation["transactionId"])


def test_donation_validation(client):
    assert donate(client, amount=0).status_code == 400
    assert donate(client, amount=-5).status_code == 400
    assert donate(client, donorName="").status_code == 400
    assert donate(client, tier="platinum").status_code == 400


def test_logged_in_donor_is_linked(client, make_member):
    member_id, headers = make_member()

    donation = donate(client, headers, tier="patron").json()["data"]

    assert donation["memberId"] == member_id


def test_statistics_count_completed_donations(client, admin_headers, make_member):
    first = donate(client, amount=100, tier="patron").json()["data"]
    second = donate(client, amount=50).json()["data"]
    donate(client, amount=1000)
    for donation in (first, second):
        settled = client.put(
            f"/api/donations/{donation['id']}/status", json={"status": "completed"}, headers=admin_headers
        )
        assert settled.status_code == 200

    _, member = make_member()
    assert client.get("/api/donations/stats/summary", headers=member).status_code == 403
    stats = client.get("/api/donations/stats/summary", headers=admin_headers).json()["data"]
    assert stats["totalDonations"] == 150
    assert stats["donorCount"] == 2
    assert stats["averageDonation"] == 75
    assert stats["maxDonation"] == 100
    assert stats["minDonation"] == 50
    assert stats["byTier"] == [
        {"tier": "patron", "count": 1, "total": 100},
        {"tier": "supporter", "count": 1, "total": 50},
    ]


def test_listing_filters_by_amount_and_status(client, admin_headers):
    donate(client, amount=10)
    big = donate(client, amount=500).json()["data"]

    listed = client.get("/api/donations", params={"minAmount": 100}, headers=admin_headers).json()
    assert [item["id"] for item in listed["data"]] == [big["id"]]
    assert client.get("/api/donations", params={"status": "completed"}, headers=admin_headers).json()["count"] == 0


def test_anonymous_donations_are_visible_to_admins_only(client, admin_headers, make_member):
    _, member = make_member()
    anonymous = donate(client, isAnonymous=True).json()["data"]
    named = donate(client).json()["data"]

    assert client.get(f"/api/donations/{anonymous['id']}", headers=member).status_code == 403
    assert client.get(f"/api/donations/{anonymous['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/donations/{named['id']}", headers=member).status_code == 200
    assert client.get(f"/api/donations/{named['id']}").status_code == 401


def test_status_changes_and_deletes_are_admin_only(client, admin_headers, make_member):
    _, member = make_member()
    donation = donate(client).json()["data"]
    url = f"/api/donations/{donation['id']}"

    assert client.put(f"{url}/status", json={"status": "refunded"}, headers=member).status_code == 403
    assert client.put(f"{url}/status", json={"status": "lost"}, headers=admin_headers).status_code == 400
    assert client.delete(url, headers=member).status_code == 403
    assert client.delete(url, headers=admin_headers).status_code == 200
    assert client.get(url, headers=admin_headers).status_code == 404
