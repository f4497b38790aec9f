import pytest


@pytest.fixture
def concert(client, admin_headers):
    response = client.post(
        "/api/events",
        json={
            "title": "Christmas Carols",
            "date": "2025-12-20",
            "time": "18:30",
            "location": "Main Auditorium",
            "eventType": "performance",
            "capacity": 2,
        },
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.fixture
def practice(client, admin_headers):
    response = client.post(
        "/api/schedules",
        json={
            "title": "Sectional rehearsal",
            "date": "2025-11-04",
            "timePeriod": {"startTime": "16:00", "endTime": "18:00"},
            "location": {"lectureHallId": "f1304"},
        },
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_event_creation_rules(client, admin_headers, make_member):
    _, headers = make_member()
    event = {"title": "Gala", "date": "2025-10-01", "eventType": "charity"}

    assert client.post("/api/events", json=event, headers=headers).status_code == 403
    assert client.post("/api/events", json={"title": "Gala"}, headers=admin_headers).status_code == 400
    assert client.post("/api/events", json={**event, "eventType": "party"}, headers=admin_headers).status_code == 400
    created = client.post("/api/events", json=event, headers=admin_headers).json()["data"]
    assert created["capacity"] == 100
    assert created["status"] == "upcoming"

    public = client.get("/api/events", params={"eventType": "charity"})
    assert public.status_code == 200
    assert public.json()["count"] == 1


def test_registration_respects_capacity(client, concert, make_member):
    _, first = make_member()
    _, second = make_member()
    _, third = make_member()
    url = f"/api/events/{concert['id']}/register"

    registered = client.post(url, headers=first)
    assert registered.status_code == 200
    assert registered.json()["data"]["registeredCount"] == 1
    assert client.post(url, headers=first).status_code == 400
    assert client.post(url, headers=second).status_code == 200

    full = client.post(url, headers=third)
    assert full.status_code == 400
    assert full.json()["detail"] == "Event is at capacity."

    left = client.delete(url, headers=first)
    assert left.json()["data"]["registeredCount"] == 1
    assert client.post(url, headers=third).status_code == 200
    assert client.post("/api/events/999/register", headers=third).status_code == 404


def test_event_update_and_delete(client, concert, admin_headers):
    updated = client.put(
        f"/api/events/{concert['id']}", json={"status": "completed", "capacity": 50}, headers=admin_headers
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["status"] == "completed"
    assert updated.json()["data"]["capacity"] == 50

    assert client.delete(f"/api/events/{concert['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/events/{concert['id']}").status_code == 404


def test_schedule_validation(client, admin_headers, practice):
    assert practice["location"]["lectureHallId"] == "F1304"
    assert practice["timePeriod"] == {"startTime": "16:00", "endTime": "18:00"}

    backwards = client.post(
        "/api/schedules",
        json={
            "title": "Late",
            "date": "2025-11-05",
            "timePeriod": {"startTime": "18:00", "endTime": "16:00"},
            "location": {"lectureHallId": "A401"},
        },
        headers=admin_headers,
    )
    assert backwards.status_code == 400

    moved = client.put(
        f"/api/schedules/{practice['id']}", json={"timePeriod": {"endTime": "19:00"}}, headers=admin_headers
    )
    assert moved.json()["data"]["timePeriod"] == {"startTime": "16:00", "endTime": "19:00"}


def test_attendance_marks_are_unique_per_session(client, admin_headers, make_member, practice):
    member_id, headers = make_member()
    mark = {"memberId": member_id, "status": "present", "scheduleId": practice["id"]}

    assert client.post("/api/attendance/mark", json=mark, headers=headers).status_code == 403
    first = client.post("/api/attendance/mark", json=mark, headers=admin_headers)
    assert first.status_code == 201
    second = client.post("/api/attendance/mark", json={**mark, "status": "late"}, headers=admin_headers)
    assert second.json()["data"]["id"] == first.json()["data"]["id"]
    assert second.json()["data"]["status"] == "late"

    summary = client.get(f"/api/attendance/schedule/{practice['id']}", headers=admin_headers).json()["data"]
    assert summary["stats"]["total"] == 1
    assert summary["stats"]["late"] == 1
    assert summary["stats"]["present"] == 0


def test_attendance_requires_exactly_one_session(client, admin_headers, make_member, concert, practice):
    member_id, _ = make_member()
    base = {"memberId": member_id, "status": "present"}

    assert client.post("/api/attendance/mark", json=base, headers=admin_headers).status_code == 400
    both = {**base, "eventId": concert["id"], "scheduleId": practice["id"]}
    assert client.post("/api/attendance/mark", json=both, headers=admin_headers).status_code == 400
    assert client.post("/api/attendance/mark", json={**base, "eventId": 999}, headers=admin_headers).status_code == 404
    bad_status = {**base, "eventId": concert["id"], "status": "asleep"}
    assert client.post("/api/attendance/mark", json=bad_status, headers=admin_headers).status_code == 400


def test_event_attendance_lists_registered_members(client, admin_headers, make_member, concert):
    member_id, headers = make_member()
    other_id, _ = make_member()
    client.post(f"/api/events/{concert['id']}/register", headers=headers)
    client.post(
        "/api/attendance/mark",
        json={"memberId": member_id, "status": "present", "eventId": concert["id"]},
        headers=admin_headers,
    )

    data = client.get(f"/api/attendance/event/{concert['id']}", headers=admin_headers).json()["data"]
    assert data["stats"]["totalRegistered"] == 1
    assert data["stats"]["present"] == 1
    assert data["attendance"][0]["memberId"] == member_id
    assert data["attendance"][0]["attendance"]["status"] == "present"
    assert all(entry["memberId"] != other_id for entry in data["attendance"])


def test_member_history_is_private(client, admin_headers, make_member, practice):
    alice_id, alice = make_member()
    _, bob = make_member()
    client.post(
        "/api/attendance/mark",
        json={"memberId": alice_id, "status": "excused", "scheduleId": practice["id"], "comments": "exam"},
        headers=admin_headers,
    )

    own = client.get(f"/api/attendance/member/{alice_id}", headers=alice)
    assert own.status_code == 200
    assert own.json()["data"]["stats"]["excused"] == 1
    assert own.json()["pagination"]["total"] == 1
    assert client.get(f"/api/attendance/member/{alice_id}", headers=bob).status_code == 403


def test_attendance_list_paginates(client, admin_headers, make_member, practice):
    for _ in range(3):
        member_id, _ = make_member()
        client.post(
            "/api/attendance/mark",
            json={"memberId": member_id, "status": "present", "scheduleId": practice["id"]},
            headers=admin_headers,
        )

    page = client.get("/api/attendance/list", params={"limit": 2, "page": 2}, headers=admin_headers).json()
    assert len(page["data"]) == 1
    assert page["pagination"] == {"total": 3, "page": 2, "limit": 2, "pages": 2}


def test_attendance_update_and_delete(client, admin_headers, make_member, practice):
    member_id, _ = make_member()
    record = client.post(
        "/api/attendance/mark",
        json={"memberId": member_id, "status": "absent", "scheduleId": practice["id"]},
        headers=admin_headers,
    ).json()["data"]

    updated = client.put(f"/api/attendance/{record['id']}", json={"status": "excused", "comments": "sick"}, headers=admin_headers)
    assert updated.json()["data"]["status"] == "excused"
    assert updated.json()["data"]["comments"] == "sick"
    assert client.delete(f"/api/attendance/{record['id']}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/attendance/{record['id']}", headers=admin_headers).status_code == 404
