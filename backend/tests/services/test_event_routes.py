"""Event Routes — HTTP contract for events, ticket issuance and check-in.

Invariants:
    - Event payloads never include admin_code
    - Attendance: 201 with attendance_id, then 400 for the same nullifier
    - A body event_id that contradicts the path is rejected
"""

from sqlalchemy import func, select

from proofpass.models.attendance import Attendance

NEW_EVENT = {
    "name": "ZK Summit",
    "description": "Proofs all day",
    "url": "https://zk.example.com",
    "admin_code": "door-code",
    "start_date": "2026-07-01T09:00:00Z",
    "end_date": "2026-07-02T18:00:00Z",
}


def _attendance(event, **overrides):
    body = {
        "type": "1",
        "context": event.context_id,
        "nullifier": "N1",
        "admin_code": "secret",
    }
    body.update(overrides)
    return body


async def test_list_and_get_events_hide_admin_code(client, seed_event):
    res = await client.get("/v1/events")
    assert res.status_code == 200
    assert [e["id"] for e in res.json()] == [seed_event.id]
    assert "admin_code" not in res.json()[0]

    res = await client.get(f"/v1/events/{seed_event.id}")
    assert res.status_code == 200
    assert res.json()["context_id"] == seed_event.context_id
    assert "admin_code" not in res.json()


async def test_get_unknown_event_is_404(client):
    res = await client.get("/v1/events/missing")
    assert res.status_code == 404


async def test_create_event(client, auth_headers, seed_user, registry):
    res = await client.post("/v1/events", json=NEW_EVENT, headers=auth_headers(seed_user))
    assert res.status_code == 201
    body = res.json()
    assert body["context_string"] == f"[proofpass.io][{body['id']}]ZK Summit"
    assert body["context_id"] == await registry.calculate_context_id(body["context_string"])
    assert body["chain_id"] == "1"
    assert body["issuer_key_id"] == "0xc4525dA874A6A3877db65e37f21eEc0b41ef9877"
    assert "admin_code" not in body


async def test_create_event_requires_token(client):
    res = await client.post("/v1/events", json=NEW_EVENT)
    assert res.status_code == 401


async def test_create_event_rejects_inverted_dates(client, auth_headers, seed_user):
    payload = {**NEW_EVENT, "start_date": "2026-07-03T00:00:00Z"}
    res = await client.post("/v1/events", json=payload, headers=auth_headers(seed_user))
    assert res.status_code == 400


async def test_update_event_by_admin(client, auth_headers, seed_user, seed_event):
    res = await client.put(
        f"/v1/events/{seed_event.id}",
        json={"description": "Updated"},
        headers=auth_headers(seed_user),
    )
    assert res.status_code == 200
    assert res.json()["description"] == "Updated"
    assert res.json()["name"] == "DevCon"


async def test_update_event_by_non_admin_is_401(client, auth_headers, bare_user, seed_event):
    res = await client.put(
        f"/v1/events/{seed_event.id}",
        json={"name": "Hijacked"},
        headers=auth_headers(bare_user),
    )
    assert res.status_code == 401


async def test_request_ticket_credential(client, auth_headers, seed_user, seed_event, seed_registration, issuer):
    res = await client.post(
        f"/v1/events/{seed_event.id}/request-ticket-credential",
        headers=auth_headers(seed_user),
    )
    assert res.status_code == 201
    assert res.json()["event_id"] == seed_event.id
    assert res.json()["credential"] == "signed-ticket-1"
    assert issuer.requests[0].header.context == seed_event.context_id


async def test_request_ticket_without_registration_is_400(client, auth_headers, seed_user, seed_event, issuer):
    res = await client.post(
        f"/v1/events/{seed_event.id}/request-ticket-credential",
        headers=auth_headers(seed_user),
    )
    assert res.status_code == 400
    assert issuer.requests == []


async def test_record_attendance_then_conflict(client, seed_event):
    """Seed 3 over HTTP."""
    url = f"/v1/events/{seed_event.id}/attendance"
    res = await client.post(url, json=_attendance(seed_event))
    assert res.status_code == 201
    assert res.json()["attendance_id"]

    res = await client.post(url, json=_attendance(seed_event))
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "ALREADY_RECORDED"


async def test_record_attendance_wrong_admin_code(client, seed_event, test_db):
    """Seed 4 over HTTP."""
    res = await client.post(
        f"/v1/events/{seed_event.id}/attendance",
        json=_attendance(seed_event, nullifier="N2", admin_code="wrong-code"),
    )
    assert res.status_code == 401
    count = (await test_db.execute(select(func.count()).select_from(Attendance))).scalar_one()
    assert count == 0


async def test_record_attendance_rejects_mismatched_body_event(client, seed_event):
    res = await client.post(
        f"/v1/events/{seed_event.id}/attendance",
        json=_attendance(seed_event, event_id="another-event"),
    )
    assert res.status_code == 400


async def test_record_attendance_accepts_matching_body_event_and_key(client, seed_event):
    res = await client.post(
        f"/v1/events/{seed_event.id}/attendance",
        json=_attendance(
            seed_event, event_id=seed_event.id,
            key_id="0xc4525dA874A6A3877db65e37f21eEc0b41ef9877",
        ),
    )
    assert res.status_code == 201


async def test_record_attendance_unknown_event_is_404(client, seed_event):
    res = await client.post("/v1/events/missing/attendance", json=_attendance(seed_event))
    assert res.status_code == 404


async def test_record_attendance_bad_type_and_context(client, seed_event):
    url = f"/v1/events/{seed_event.id}/attendance"
    res = await client.post(url, json=_attendance(seed_event, type="7"))
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_CREDENTIAL_TYPE"

    res = await client.post(url, json=_attendance(seed_event, context="123"))
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_CONTEXT"
