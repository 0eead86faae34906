from __future__ import annotations

import uuid


def test_health_reports_database(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"app": "ok", "database": "ok"}


def test_guest_login_sets_cookie_identity(client):
    r = client.post("/api/auth/guest")
    assert r.status_code == 200
    body = r.json()
    assert body["token_type"] == "bearer"

    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["user_id"] == body["user_id"]
    assert me.json()["is_guest"] is True


def test_draft_requires_identity(client):
    r = client.get("/api/draft/")
    assert r.status_code == 401
    assert r.json()["detail"] == "NOT_AUTHENTICATED"

    r = client.get("/api/draft/", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json()["detail"] == "INVALID_TOKEN"


def test_catalog_is_public(client, catalog):
    r = client.get("/api/classes/math/50")
    assert r.status_code == 200
    body = r.json()
    assert (body["dept"], body["code"], body["title"]) == ("MATH", "50", "MATH 50")
    assert {s["uuid"] for s in body["sections"]} == {str(catalog["math50_lec"]), str(catalog["math50_lec_tuth"])}


def test_add_section_outcomes(client, catalog, auth_headers):
    h = auth_headers()

    r = client.post("/api/draft/sections", json={"uuid": str(catalog["cs101_lec_a"])}, headers=h)
    assert r.status_code == 200
    assert r.json()["outcome"] == "NEW"
    assert r.json()["draft"]["state"] == "POPULATED_NEW"

    r = client.post("/api/draft/sections", json={"uuid": str(catalog["math50_lec"])}, headers=h)
    assert r.status_code == 409
    assert r.json()["outcome"] == "TIME_CONFLICT"
    assert r.json()["other"]["uuid"] == str(catalog["cs101_lec_a"])

    r = client.post("/api/draft/sections", json={"uuid": str(catalog["cs101_lec_a"])}, headers=h)
    assert r.status_code == 409
    assert r.json()["outcome"] == "DUPLICATE"

    r = client.post("/api/draft/sections", json={"uuid": str(catalog["cs101_lec_b"])}, headers=h)
    assert r.status_code == 200
    assert r.json()["outcome"] == "REPLACE"
    assert [s["uuid"] for s in r.json()["draft"]["sections"]] == [str(catalog["cs101_lec_b"])]

    r = client.post("/api/draft/sections", json={"uuid": str(uuid.uuid4())}, headers=h)
    assert r.status_code == 404
    assert r.json()["detail"] == "SECTION_NOT_FOUND"


def test_drafts_are_per_user(client, catalog, auth_headers):
    client.post("/api/draft/sections", json={"uuid": str(catalog["cs101_lec_a"])}, headers=auth_headers("alice"))

    r = client.get("/api/draft/", headers=auth_headers("bob"))

    assert r.status_code == 200
    assert r.json()["state"] == "EMPTY"


def test_save_then_autosync_and_reload(client, catalog, auth_headers):
    h = auth_headers()
    client.post("/api/draft/sections", json={"uuid": str(catalog["cs101_lec_a"])}, headers=h)

    r = client.post("/api/draft/save", headers=h)
    assert r.status_code == 400
    assert r.json()["status"] == "EMPTY_NAME"

    client.put("/api/draft/", json={"name": "Plan A", "term": "Fall", "year": "2025"}, headers=h)
    r = client.post("/api/draft/save", headers=h)
    assert r.status_code == 200
    schedule_id = r.json()["schedule_id"]

    # Linked now: accepted mutations reach the saved schedule without another save.
    r = client.post("/api/draft/sections", json={"uuid": str(catalog["cs101_lab"])}, headers=h)
    assert r.json()["sync"] == "SYNCED"
    saved = client.get(f"/api/schedules/{schedule_id}", headers=h).json()
    assert [s["uuid"] for s in saved["sections"]] == [str(catalog["cs101_lec_a"]), str(catalog["cs101_lab"])]

    r = client.get("/api/draft/", headers=h)
    assert r.json()["credit_hours"] == 4.0
    assert r.json()["state"] == "POPULATED_EDITING_EXISTING"

    client.delete("/api/draft/", headers=h)
    r = client.post(f"/api/draft/load/{schedule_id}", headers=h)
    assert r.status_code == 200
    assert r.json()["schedule_id"] == schedule_id
    assert len(r.json()["sections"]) == 2


def test_remove_sections(client, catalog, auth_headers):
    h = auth_headers()
    client.post("/api/draft/sections", json={"uuid": str(catalog["cs101_lec_a"])}, headers=h)
    client.post("/api/draft/sections", json={"uuid": str(catalog["cs101_lab"])}, headers=h)

    r = client.delete("/api/draft/sections/7", headers=h)
    assert r.status_code == 200
    assert len(r.json()["sections"]) == 2

    r = client.delete(f"/api/draft/sections/by-id/{catalog['cs101_lab']}", headers=h)
    assert [s["uuid"] for s in r.json()["sections"]] == [str(catalog["cs101_lec_a"])]

    r = client.delete("/api/draft/sections/0", headers=h)
    assert r.json()["state"] == "EMPTY"


def test_schedule_crud(client, catalog, auth_headers):
    h = auth_headers()
    r = client.post(
        "/api/schedules/",
        json={"name": "Plan", "semester": "Fall", "year": 2025, "sectionIds": [str(catalog["math50_lec_tuth"])]},
        headers=h,
    )
    assert r.status_code == 200
    schedule_id = r.json()["id"]

    r = client.patch(f"/api/schedules/{schedule_id}", json={"name": "  "}, headers=h)
    assert r.status_code == 400

    r = client.patch(f"/api/schedules/{schedule_id}", json={"name": "Better"}, headers=h)
    assert r.json()["name"] == "Better"

    r = client.post(f"/api/schedules/{schedule_id}/deactivate", headers=h)
    assert r.json()["is_active"] is False
    assert client.get("/api/schedules/?only_active=true", headers=h).json() == []

    r = client.post(
        "/api/schedules/",
        json={"name": "Bad", "term": "Fall", "year": 2025, "section_ids": [str(uuid.uuid4())]},
        headers=h,
    )
    assert r.status_code == 400
    assert r.json()["detail"].startswith("UNKNOWN_SECTIONS")

    r = client.get(f"/api/schedules/{schedule_id}", headers=auth_headers("someone-else"))
    assert r.status_code == 404
    assert r.json()["code"] == "SCHEDULE_NOT_FOUND"


def test_deleting_loaded_schedule_clears_draft(client, catalog, auth_headers):
    h = auth_headers()
    r = client.post(
        "/api/schedules/",
        json={"name": "Plan", "term": "Fall", "year": 2025, "section_ids": [str(catalog["cs101_lec_a"])]},
        headers=h,
    )
    schedule_id = r.json()["id"]
    client.post(f"/api/draft/load/{schedule_id}", headers=h)

    r = client.delete(f"/api/schedules/{schedule_id}", headers=h)
    assert r.status_code == 200

    r = client.get("/api/draft/", headers=h)
    assert r.json()["state"] == "EMPTY"
    assert client.get("/api/schedules/", headers=h).json() == []
