"""
Tests for support ("hug") requests and responses
================================================
Covers:
- Create: server defaults (message, privacy, radius, 30 min expiry, status)
- Create: neighborhood derived from coordinates
- Create: verified-volunteer flag driven by the injected random source
- Create: falsy radius falls back to the default
- Create: missing userId / location → 400
- Create: 3rd request in an hour succeeds, 4th gets 429
- Create: crisis keyword in message blocks with resources, nothing stored
- Create: crisis keyword inside a long message still detected
- Nearby: includes same-coordinate request, excludes > radius, nearest first
- Nearby: default radius is 5 miles
- Nearby: expired and matched requests are excluded
- Nearby: lat=0 is a coordinate, missing lng → 400
- Respond: accept → matched, responses +1, requester notified
- Respond: decline → counted, still active, nobody notified
- Respond: repeated accepts are all counted (last write wins)
- Respond: unknown request → 404, expired → 400 with state untouched
- Respond: missing fields → 400
- Concurrency: threaded responses keep the counter in step, creates respect the limit

Run: pytest tests/test_support_requests.py -v
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta

import pytest

from moodmap.models.common import Location
from moodmap.services.errors import RateLimitExceeded

NYC = {"lat": 40.7128, "lng": -74.0060}
TIMES_SQUARE = {"lat": 40.7580, "lng": -73.9855}  # ~3.3 miles from NYC
YONKERS_ISH = {"lat": 40.8128, "lng": -74.0060}  # ~6.9 miles north
PHILADELPHIA = {"lat": 39.9526, "lng": -75.1652}  # ~80 miles


def _parse(ts: str) -> datetime:
    return datetime.fromisoformat(ts.replace("Z", "+00:00"))


def _create(client, user_id: str = "requester", location: dict = NYC, **overrides):
    body = {"userId": user_id, "location": location, **overrides}
    return client.post("/hug-requests", json=body)


def _respond(client, request_id: str, response: str = "accept", responder_id: str = "helper"):
    return client.post(
        "/hug-responses",
        json={"requestId": request_id, "responderId": responder_id, "response": response},
    )


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

class TestCreateSupportRequest:

    def test_defaults(self, client, clock):
        resp = _create(client)

        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["message"] == "Support request created"

        request = data["request"]
        assert request["id"].startswith("hug-")
        assert request["userId"] == "requester"
        assert request["message"] == "Someone nearby needs support"
        assert request["privacyLevel"] == "neighborhood"
        assert request["radius"] == 3
        assert request["status"] == "active"
        assert request["responses"] == 0
        assert request["isVerifiedVolunteer"] is False
        assert _parse(request["timestamp"]) == clock.now
        assert _parse(request["expiresAt"]) == clock.now + timedelta(minutes=30)

    def test_client_values_kept(self, client):
        resp = _create(
            client,
            message="Could use a coffee and a chat",
            privacyLevel="public",
            radius=1.5,
            expiresAt="2026-03-01T15:00:00Z",
        )

        request = resp.json()["request"]
        assert request["message"] == "Could use a coffee and a chat"
        assert request["privacyLevel"] == "public"
        assert request["radius"] == 1.5
        assert _parse(request["expiresAt"]).isoformat() == "2026-03-01T15:00:00+00:00"

    def test_neighborhood_from_coordinates(self, client):
        assert _create(client).json()["request"]["neighborhood"] == "Downtown"

    def test_zero_radius_falls_back_to_default(self, client):
        assert _create(client, radius=0).json()["request"]["radius"] == 3

    def test_verified_volunteer_when_random_below_threshold(self, make_service):
        service = make_service(0.1)
        request = service.create_support_request("requester", Location(**NYC))

        assert request.is_verified_volunteer is True

    @pytest.mark.parametrize("field", ["userId", "location"])
    def test_missing_required_field(self, client, service, field):
        body = {"userId": "requester", "location": NYC}
        del body[field]

        resp = client.post("/hug-requests", json=body)

        assert resp.status_code == 400
        assert field in resp.json()["message"]
        assert service.support_requests == []

    def test_fourth_request_in_an_hour_blocked(self, client, service):
        for _ in range(3):
            assert _create(client).status_code == 200

        resp = _create(client)

        assert resp.status_code == 429
        assert "3 support requests per hour" in resp.json()["message"]
        assert len(service.support_requests) == 3

    def test_rate_limit_resets_after_an_hour(self, client, clock):
        for _ in range(3):
            _create(client)
        clock.advance(hours=1)

        assert _create(client).status_code == 200

    def test_crisis_message_blocked(self, client, service):
        resp = _create(client, message="I feel like there is no reason to live")

        assert resp.status_code == 400
        data = resp.json()
        assert data["success"] is False
        assert data["crisisResources"]["phone"] == "988"
        assert service.support_requests == []

    def test_crisis_keyword_in_long_message_blocked(self, client, service):
        resp = _create(client, message="suicidal " + "y" * 1000)

        assert resp.status_code == 400
        assert resp.json()["crisisResources"]["phone"] == "988"
        assert service.support_requests == []

    def test_broadcast_is_logged(self, client, caplog):
        with caplog.at_level("INFO", logger="moodmap.services.moodmap"):
            _create(client)

        assert "Broadcasting support request" in caplog.text
        assert "Downtown" in caplog.text


# ---------------------------------------------------------------------------
# Nearby
# ---------------------------------------------------------------------------

class TestNearbySupportRequests:

    def test_filters_by_radius_and_sorts_nearest_first(self, client):
        near = _create(client, user_id="a", location=TIMES_SQUARE).json()["request"]["id"]
        here = _create(client, user_id="b", location=NYC).json()["request"]["id"]
        _create(client, user_id="c", location=PHILADELPHIA)

        resp = client.get(
            "/nearby-hug-requests",
            params={"lat": 40.7128, "lng": -74.0060, "radius": 5},
        )

        assert resp.status_code == 200
        data = resp.json()
        assert [r["id"] for r in data["requests"]] == [here, near]
        assert data["count"] == 2

    def test_default_radius_is_five_miles(self, client):
        _create(client, user_id="a", location=YONKERS_ISH)

        default = client.get("/nearby-hug-requests", params=NYC).json()
        wider = client.get("/nearby-hug-requests", params={**NYC, "radius": 10}).json()

        assert default["count"] == 0
        assert wider["count"] == 1

    def test_expired_requests_excluded(self, client, clock):
        _create(client, user_id="a")
        _create(client, user_id="b", expiresAt=(clock.now - timedelta(minutes=1)).isoformat())

        assert client.get("/nearby-hug-requests", params=NYC).json()["count"] == 1

        clock.advance(minutes=31)

        assert client.get("/nearby-hug-requests", params=NYC).json()["count"] == 0

    def test_matched_requests_excluded(self, client):
        request_id = _create(client).json()["request"]["id"]
        _respond(client, request_id, "accept")

        assert client.get("/nearby-hug-requests", params=NYC).json()["requests"] == []

    def test_zero_latitude_is_valid(self, client):
        _create(client, location={"lat": 0, "lng": 0})

        resp = client.get("/nearby-hug-requests", params={"lat": 0, "lng": 0})

        assert resp.status_code == 200
        assert resp.json()["count"] == 1

    def test_missing_lng(self, client):
        resp = client.get("/nearby-hug-requests", params={"lat": 40.7})

        assert resp.status_code == 400
        assert "lng" in resp.json()["message"]

    def test_non_numeric_lat(self, client):
        resp = client.get("/nearby-hug-requests", params={"lat": "north", "lng": 1})
        assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Respond
# ---------------------------------------------------------------------------

class TestRespondToSupportRequest:

    def test_accept_matches_and_notifies_requester(self, client, service):
        request_id = _create(client).json()["request"]["id"]

        resp = _respond(client, request_id, "accept")

        assert resp.status_code == 200
        data = resp.json()
        assert data["message"] == "Response recorded"
        assert data["response"]["id"].startswith("response-")
        assert data["response"]["requestId"] == request_id
        assert data["response"]["responderId"] == "helper"
        assert data["response"]["response"] == "accept"

        request = service.support_requests[0]
        assert request.status == "matched"
        assert request.responses == 1

        inbox = client.get("/push/notifications", params={"userId": "requester"}).json()
        assert inbox["unread"] == 1
        assert inbox["notifications"][0]["message"] == "Someone accepted your support request!"
        assert inbox["notifications"][0]["title"] == "MoodMap"

    def test_decline_counts_but_stays_active(self, client, service):
        request_id = _create(client).json()["request"]["id"]

        assert _respond(client, request_id, "decline").status_code == 200

        request = service.support_requests[0]
        assert request.status == "active"
        assert request.responses == 1
        assert service.notifications == []

    def test_repeated_accepts_all_counted(self, client, service):
        request_id = _create(client).json()["request"]["id"]

        _respond(client, request_id, "accept", responder_id="helper-1")
        _respond(client, request_id, "accept", responder_id="helper-2")

        request = service.support_requests[0]
        assert request.status == "matched"
        assert request.responses == 2
        assert len(service.support_responses) == 2
        assert len(service.notifications) == 2

    def test_counter_matches_recorded_responses(self, client, service):
        request_id = _create(client).json()["request"]["id"]
        for answer in ("decline", "maybe later", "accept"):
            _respond(client, request_id, answer)

        recorded = [r for r in service.support_responses if r.request_id == request_id]
        assert service.support_requests[0].responses == len(recorded) == 3

    def test_unknown_request(self, client):
        resp = _respond(client, "hug-does-not-exist")

        assert resp.status_code == 404
        assert resp.json() == {"success": False, "message": "Support request not found"}

    def test_expired_request_left_untouched(self, client, clock, service):
        request_id = _create(client).json()["request"]["id"]
        clock.advance(minutes=31)

        resp = _respond(client, request_id, "accept")

        assert resp.status_code == 400
        assert resp.json()["message"] == "This support request has expired"
        request = service.support_requests[0]
        assert request.status == "active"
        assert request.responses == 0
        assert service.support_responses == []
        assert service.notifications == []

    @pytest.mark.parametrize("field", ["requestId", "responderId", "response"])
    def test_missing_required_field(self, client, field):
        body = {"requestId": "hug-1", "responderId": "helper", "response": "accept"}
        del body[field]

        resp = client.post("/hug-responses", json=body)

        assert resp.status_code == 400
        assert field in resp.json()["message"]


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------

class TestConcurrentCalls:

    def test_threaded_responses_keep_counter_in_step(self, service):
        request = service.create_support_request("requester", Location(**NYC))

        def respond(i: int):
            answer = "accept" if i % 2 else "decline"
            return service.respond_to_support_request(request.id, f"helper-{i}", answer)

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(respond, range(50)))

        assert request.responses == len(service.support_responses) == 50
        assert request.status == "matched"
        assert len(service.notifications) == 25

    def test_threaded_creates_respect_rate_limit(self, service):
        def create(_):
            try:
                service.create_support_request("requester", Location(**NYC))
                return True
            except RateLimitExceeded:
                return False

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(create, range(20)))

        assert results.count(True) == 3
        assert len(service.support_requests) == 3
