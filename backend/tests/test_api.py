import pytest

from conftest import at


def create_user(client, name):
    resp = client.post("/users/", json={"name": name, "email": f"{name.lower()}@example.com"})
    assert resp.status_code == 201
    return resp.json()["id"]


def as_user(user_id):
    return {"X-User-Id": str(user_id)}


def create_slot(client, user_id, title, start, end, swappable=False):
    resp = client.post(
        "/slots/",
        json={"title": title, "start_time": start.isoformat(), "end_time": end.isoformat()},
        headers=as_user(user_id),
    )
    assert resp.status_code == 201, resp.text
    slot = resp.json()
    assert slot["status"] == "BUSY"
    if swappable:
        resp = client.patch(f"/slots/{slot['id']}", json={"status": "SWAPPABLE"}, headers=as_user(user_id))
        assert resp.status_code == 200, resp.text
        slot = resp.json()
    return slot


@pytest.fixture
def market(client):
    alice = create_user(client, "Alice")
    bob = create_user(client, "Bob")
    gym = create_slot(client, alice, "Gym", at(17), at(18), swappable=True)
    call = create_slot(client, bob, "Call", at(18), at(19), swappable=True)
    return alice, bob, gym, call


def test_identity_header_is_required(client):
    assert client.get("/slots/me").status_code == 401
    assert client.get("/slots/me", headers=as_user(12345)).status_code == 401


def test_overlapping_slot_returns_conflict_detail(client, market):
    alice, bob, gym, call = market

    resp = client.post(
        "/slots/",
        json={"title": "Clash", "start_time": at(17, 30).isoformat(), "end_time": at(18, 30).isoformat()},
        headers=as_user(bob),
    )

    assert resp.status_code == 409
    body = resp.json()
    assert body["error"] == "time_conflict"
    assert body["conflict"]["title"] == "Gym"
    assert body["conflict"]["next_available"] == at(18).isoformat()


def test_inverted_range_is_a_validation_error(client, market):
    alice = market[0]
    resp = client.post(
        "/slots/",
        json={"title": "Backwards", "start_time": at(22).isoformat(), "end_time": at(21).isoformat()},
        headers=as_user(alice),
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_error"


def test_timezone_aware_input_is_stored_as_utc(client, market):
    alice = market[0]
    resp = client.post(
        "/slots/",
        json={"title": "Breakfast", "start_time": "2026-11-02T09:00:00+02:00", "end_time": "2026-11-02T10:00:00+02:00"},
        headers=as_user(alice),
    )
    assert resp.status_code == 201
    assert resp.json()["start_time"] == "2026-11-02T07:00:00"


def test_marketplace_excludes_own_slots(client, market):
    alice, bob, gym, call = market
    create_slot(client, bob, "Private", at(8), at(9))

    resp = client.get("/swappable-slots", headers=as_user(alice))
    assert resp.status_code == 200
    assert [s["id"] for s in resp.json()] == [call["id"]]
    assert resp.json()[0]["owner"]["name"] == "Bob"

    others = client.get("/slots/others", headers=as_user(alice)).json()
    assert [s["title"] for s in others] == ["Private", "Call"]


def test_accept_flow(client, sink, market):
    alice, bob, gym, call = market

    resp = client.post("/swap-request", json={"mySlotId": call["id"], "theirSlotId": gym["id"]}, headers=as_user(bob))
    assert resp.status_code == 201, resp.text
    swap = resp.json()
    assert swap["status"] == "PENDING"
    assert swap["my_slot"]["status"] == "SWAP_PENDING"
    assert swap["their_slot"]["status"] == "SWAP_PENDING"
    assert swap["responder"]["id"] == alice

    listing = client.get("/swap-requests", headers=as_user(alice)).json()
    assert [s["id"] for s in listing["incoming"]] == [swap["id"]]
    assert listing["outgoing"] == []
    listing = client.get("/swap-requests", headers=as_user(bob)).json()
    assert [s["id"] for s in listing["outgoing"]] == [swap["id"]]

    resp = client.post(f"/swap-response/{swap['id']}", json={"accept": True}, headers=as_user(alice))
    assert resp.status_code == 200, resp.text
    result = resp.json()
    assert result["message"] == "Swap accepted successfully"
    assert result["request"]["status"] == "ACCEPTED"
    assert result["my_slot"]["owner_id"] == alice
    assert result["their_slot"]["owner_id"] == bob

    alice_slots = client.get("/slots/me", headers=as_user(alice)).json()
    assert [(s["title"], s["status"]) for s in alice_slots] == [("Call", "BUSY")]
    bob_slots = client.get("/slots/me", headers=as_user(bob)).json()
    assert [(s["title"], s["status"]) for s in bob_slots] == [("Gym", "BUSY")]

    assert client.get("/swap-requests", headers=as_user(alice)).json()["incoming"] == []
    history = client.get("/swap-requests/history", headers=as_user(bob)).json()
    assert [h["status"] for h in history] == ["ACCEPTED"]
    assert sink.types().count("swapUpdated") == 2


def test_reject_flow_and_duplicate_response(client, market):
    alice, bob, gym, call = market
    swap = client.post(
        "/swap-request",
        json={"my_slot_id": call["id"], "their_slot_id": gym["id"]},
        headers=as_user(bob),
    ).json()

    resp = client.post(f"/swap-response/{swap['id']}", json={"accept": False}, headers=as_user(alice))
    assert resp.status_code == 200
    assert resp.json()["message"] == "Swap rejected"
    assert resp.json()["my_slot"]["status"] == "SWAPPABLE"
    assert resp.json()["their_slot"]["owner_id"] == alice

    again = client.post(f"/swap-response/{swap['id']}", json={"accept": True}, headers=as_user(alice))
    assert again.status_code == 409
    assert again.json()["error"] == "invalid_state"
    assert again.json()["retryable"] is False


def test_swap_error_mapping(client, market):
    alice, bob, gym, call = market

    resp = client.post("/swap-request", json={"my_slot_id": gym["id"], "their_slot_id": call["id"]}, headers=as_user(bob))
    assert resp.status_code == 403
    assert resp.json()["error"] == "forbidden"

    resp = client.post("/swap-request", json={"my_slot_id": call["id"], "their_slot_id": 9999}, headers=as_user(bob))
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"

    resp = client.post("/swap-request", json={"my_slot_id": call["id"]}, headers=as_user(bob))
    assert resp.status_code == 422

    swap = client.post(
        "/swap-request", json={"my_slot_id": call["id"], "their_slot_id": gym["id"]}, headers=as_user(bob)
    ).json()
    resp = client.post(f"/swap-response/{swap['id']}", json={"accept": True}, headers=as_user(bob))
    assert resp.status_code == 403

    carol = create_user(client, "Carol")
    assert client.get(f"/swap-requests/{swap['id']}", headers=as_user(carol)).status_code == 403
    assert client.get(f"/swap-requests/{swap['id']}", headers=as_user(alice)).status_code == 200


def test_pending_slot_is_locked_against_edits(client, market):
    alice, bob, gym, call = market
    client.post("/swap-request", json={"my_slot_id": call["id"], "their_slot_id": gym["id"]}, headers=as_user(bob))

    resp = client.patch(f"/slots/{gym['id']}", json={"status": "BUSY"}, headers=as_user(alice))
    assert resp.status_code == 409
    assert client.delete(f"/slots/{gym['id']}", headers=as_user(alice)).status_code == 409

    resp = client.patch(f"/slots/{gym['id']}", json={"status": "SWAP_PENDING"}, headers=as_user(alice))
    assert resp.status_code == 400


@pytest.mark.parametrize("field", ["status", "start_time", "end_time"])
def test_patch_with_null_required_field_is_a_validation_error(client, market, field):
    alice, bob, gym, call = market

    resp = client.patch(f"/slots/{gym['id']}", json={field: None}, headers=as_user(alice))
    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_error"

    mine = client.get("/slots/me", headers=as_user(alice)).json()
    assert mine[0]["status"] == gym["status"]
    assert mine[0]["start_time"] == gym["start_time"]


def test_delete_own_slot(client, market):
    alice, bob, gym, call = market
    assert client.delete(f"/slots/{gym['id']}", headers=as_user(bob)).status_code == 403
    assert client.delete(f"/slots/{gym['id']}", headers=as_user(alice)).status_code == 204
    assert client.get("/slots/me", headers=as_user(alice)).json() == []
