from conftest import PASSWORD


def test_member_directory_is_for_reviewers(client, make_member, admin_headers):
    _, headers = make_member()

    assert client.get("/api/members", headers=headers).status_code == 403
    listing = client.get("/api/members", headers=admin_headers).json()["data"]
    assert {item["studentId"] for item in listing} >= {"AD00000001", "CS10000001"}
    assert all("passwordHash" not in item for item in listing)


def test_members_update_only_their_own_profile(client, make_member, admin_headers):
    alice_id, alice = make_member()
    bob_id, _ = make_member()

    updated = client.put(f"/api/members/{alice_id}", json={"bio": " Alto section ", "phoneNumber": "0771234567"}, headers=alice)
    assert updated.status_code == 200
    assert updated.json()["data"]["bio"] == "Alto section"

    assert client.put(f"/api/members/{bob_id}", json={"bio": "hacked"}, headers=alice).status_code == 403
    assert client.put(f"/api/members/{alice_id}", json={"firstName": "  "}, headers=alice).status_code == 400
    assert client.put(f"/api/members/{bob_id}", json={"bio": "Tenor"}, headers=admin_headers).status_code == 200


def test_suspended_member_cannot_log_in(client, make_member, admin_headers):
    member_id, _ = make_member()

    suspended = client.put(f"/api/members/{member_id}/status", json={"status": "suspended"}, headers=admin_headers)
    assert suspended.status_code == 200
    assert suspended.json()["data"]["status"] == "suspended"

    login = client.post("/api/auth/login", json={"studentId": "CS10000001", "password": PASSWORD})
    assert login.status_code == 403


def test_verified_member_cannot_return_to_inactive(client, make_member, admin_headers):
    member_id, _ = make_member()

    response = client.put(f"/api/members/{member_id}/status", json={"status": "inactive"}, headers=admin_headers)
    assert response.status_code == 400
    assert client.put(f"/api/members/{member_id}/status", json={"status": "retired"}, headers=admin_headers).status_code == 400


def test_deleted_member_token_stops_working(client, make_member, admin_headers):
    member_id, headers = make_member()

    assert client.delete(f"/api/members/{member_id}", headers=headers).status_code == 403
    assert client.delete(f"/api/members/{member_id}", headers=admin_headers).status_code == 200
    assert client.get("/api/auth/profile", headers=headers).status_code == 401
