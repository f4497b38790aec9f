import pytest

SHEET = ("ave-verum.pdf", b"%PDF-1.4 sheet music", "application/pdf")


def submit(client, headers, *, title="Ave Verum", resource_type="sheet_music", file=SHEET, **form):
    data = {"songTitle": title, "description": "SATB score", "resourceType": resource_type, **form}
    files = {"file": file} if file else None
    return client.post("/api/resource-requests", data=data, files=files, headers=headers)


@pytest.fixture
def member(make_member):
    return make_member()


def test_rejected_request_keeps_reason_and_discards_upload(client, member, admin_headers, blob_store):
    _, headers = member
    request = submit(client, headers).json()["data"]
    assert request["status"] == "pending"
    assert request["isLink"] is False
    assert request["fileType"] == "pdf"

    rejected = client.put(
        f"/api/resource-requests/{request['id']}/reject", json={"reason": "duplicate"}, headers=admin_headers
    )
    assert rejected.status_code == 200
    assert rejected.json()["data"]["status"] == "rejected"
    assert rejected.json()["data"]["rejectionReason"] == "duplicate"
    assert len(blob_store.deleted) == 1

    approve = client.put(f"/api/resource-requests/{request['id']}/approve", headers=admin_headers)
    assert approve.status_code == 400
    assert "already rejected" in approve.json()["detail"]
    assert client.get("/api/resources", headers=headers).json()["count"] == 0


def test_rejection_stands_when_blob_cleanup_fails(client, member, admin_headers, blob_store):
    _, headers = member
    request = submit(client, headers).json()["data"]
    blob_store.fail_deletes = True

    rejected = client.put(
        f"/api/resource-requests/{request['id']}/reject", json={"reason": "wrong key"}, headers=admin_headers
    )

    assert rejected.status_code == 200
    assert rejected.json()["data"]["status"] == "rejected"


def test_approval_publishes_exactly_one_resource(client, member, admin_headers):
    member_id, headers = member
    request = submit(client, headers).json()["data"]

    approved = client.put(f"/api/resource-requests/{request['id']}/approve", headers=admin_headers)
    assert approved.status_code == 200
    body = approved.json()["data"]
    assert body["request"]["status"] == "approved"
    assert body["resource"]["songTitle"] == "Ave Verum"
    assert body["resource"]["uploadedBy"] == member_id
    assert body["resource"]["fileUrl"] == request["fileUrl"]

    again = client.put(f"/api/resource-requests/{request['id']}/approve", headers=admin_headers)
    assert again.status_code == 400
    assert client.get("/api/resources", headers=headers).json()["count"] == 1


def test_link_requests_need_a_url(client, member):
    _, headers = member

    missing = submit(client, headers, resource_type="youtube_link", file=None)
    assert missing.status_code == 400

    link = submit(client, headers, resource_type="youtube_link", file=None, fileUrl="https://youtu.be/abc")
    assert link.status_code == 201
    assert link.json()["data"]["isLink"] is True
    assert link.json()["data"]["fileType"] == "link"


def test_unknown_resource_type_is_rejected(client, member):
    _, headers = member

    assert submit(client, headers, resource_type="kazoo").status_code == 400


def test_requests_are_private_to_their_author(client, make_member, admin_headers):
    _, alice = make_member()
    _, bob = make_member()
    request = submit(client, alice).json()["data"]

    assert client.get("/api/resource-requests", headers=alice).status_code == 403
    assert client.get("/api/resource-requests/my-requests", headers=bob).json()["count"] == 0
    assert client.delete(f"/api/resource-requests/{request['id']}", headers=bob).status_code == 403
    pending = client.get("/api/resource-requests", params={"status": "pending"}, headers=admin_headers)
    assert pending.json()["count"] == 1
    assert client.delete(f"/api/resource-requests/{request['id']}", headers=alice).status_code == 200


def test_restricted_resources_are_hidden_from_members(client, member, admin_headers):
    _, headers = member
    public = client.post(
        "/api/resources",
        data={"songTitle": "Gloria", "description": "Audio", "resourceType": "audio_alto"},
        files={"file": ("alto.mp3", b"ID3 audio", "audio/mpeg")},
        headers=admin_headers,
    ).json()["data"]
    hidden = client.post(
        "/api/resources",
        data={
            "songTitle": "Gloria",
            "description": "Conductor notes",
            "resourceType": "google_drive_link",
            "fileUrl": "https://drive.google.com/x",
            "visibility": "admin_moderator_only",
        },
        headers=admin_headers,
    ).json()["data"]

    listed = client.get("/api/resources", headers=headers).json()["data"]
    assert [item["id"] for item in listed] == [public["id"]]
    assert client.get(f"/api/resources/{hidden['id']}", headers=headers).status_code == 403
    grouped = client.get("/api/resources/by-song", headers=admin_headers).json()["data"]
    assert grouped[0]["songTitle"] == "Gloria"
    assert len(grouped[0]["resources"]) == 2


def test_favorites(client, member, admin_headers):
    _, headers = member
    resource = client.post(
        "/api/resources",
        data={"songTitle": "Hallelujah", "description": "Score", "resourceType": "sheet_music"},
        files={"file": SHEET},
        headers=admin_headers,
    ).json()["data"]

    added = client.post("/api/favorites", json={"resourceId": resource["id"]}, headers=headers)
    assert added.status_code == 201
    assert client.post("/api/favorites", json={"resourceId": resource["id"]}, headers=headers).status_code == 400
    assert client.get(f"/api/favorites/check/{resource['id']}", headers=headers).json()["data"]["isFavorite"] is True
    listed = client.get("/api/favorites", headers=headers).json()["data"]
    assert listed[0]["resource"]["songTitle"] == "Hallelujah"

    client.delete(f"/api/resources/{resource['id']}", headers=admin_headers)
    assert client.get("/api/favorites", headers=headers).json()["count"] == 0
    assert client.delete(f"/api/favorites/{resource['id']}", headers=headers).status_code == 404
