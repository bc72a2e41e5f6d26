"""
Integration tests for RSVP toggling, attendance status and direct RSVPs.
"""
import pytest
from httpx import AsyncClient
from uuid import uuid4


@pytest.mark.integration
@pytest.mark.asyncio
class TestToggleRSVP:
    """POST /api/v1/events/{id}/rsvp and GET /api/v1/events/{id}/rsvp/{userId}"""

    async def test_toggle_round_trip(self, client: AsyncClient, test_event, test_student):
        event_id, user_id = str(test_event.id), str(test_student.id)
        url = f"/api/v1/events/{event_id}/rsvp"

        first = await client.post(url, json={"userId": user_id})
        assert first.status_code == 201
        assert first.json() == {"message": "RSVP created", "attending": True, "attendeeCount": 1}

        status = await client.get(f"{url}/{user_id}")
        assert status.json() == {"attending": True}
        assert (await client.get(f"/api/v1/events/{event_id}")).json()["attendeeCount"] == 1

        second = await client.post(url, json={"userId": user_id})
        assert second.status_code == 200
        assert second.json() == {"message": "RSVP removed", "attending": False, "attendeeCount": 0}

        status = await client.get(f"{url}/{user_id}")
        assert status.status_code == 200
        assert status.json() == {"attending": False}
        assert (await client.get(f"/api/v1/events/{event_id}")).json()["attendeeCount"] == 0

    async def test_counter_across_users(self, client: AsyncClient, test_event, test_student, other_students):
        url = f"/api/v1/events/{test_event.id}/rsvp"
        user_ids = [str(u.id) for u in [test_student, *other_students]]

        for user_id in user_ids:
            response = await client.post(url, json={"userId": user_id})
        assert response.json()["attendeeCount"] == 3

        response = await client.post(url, json={"userId": user_ids[1]})
        assert response.json()["attendeeCount"] == 2

    async def test_missing_user_id(self, client: AsyncClient, test_event):
        response = await client.post(f"/api/v1/events/{test_event.id}/rsvp", json={})

        assert response.status_code == 400
        assert "userId" in response.json()["detail"]

    async def test_malformed_ids(self, client: AsyncClient, test_event, test_student):
        response = await client.post("/api/v1/events/nope/rsvp", json={"userId": str(test_student.id)})
        assert response.status_code == 400

        response = await client.post(f"/api/v1/events/{test_event.id}/rsvp", json={"userId": "12345"})
        assert response.status_code == 400

        response = await client.get(f"/api/v1/events/{test_event.id}/rsvp/12345")
        assert response.status_code == 400

    async def test_unknown_event(self, client: AsyncClient, test_student):
        response = await client.post(f"/api/v1/events/{uuid4()}/rsvp", json={"userId": str(test_student.id)})

        assert response.status_code == 404
        assert response.json()["detail"] == "Event not found"

    async def test_unknown_user(self, client: AsyncClient, test_event):
        event_id = str(test_event.id)
        response = await client.post(f"/api/v1/events/{event_id}/rsvp", json={"userId": str(uuid4())})

        assert response.status_code == 404
        assert (await client.get(f"/api/v1/events/{event_id}")).json()["attendeeCount"] == 0


@pytest.mark.integration
@pytest.mark.asyncio
class TestDirectRSVP:
    """POST /api/v1/rsvps and GET /api/v1/rsvps/{userId}"""

    async def test_create_then_duplicate(self, client: AsyncClient, test_event, test_student):
        event_id, user_id = str(test_event.id), str(test_student.id)
        body = {"userId": user_id, "eventId": event_id}

        first = await client.post("/api/v1/rsvps", json=body)
        assert first.status_code == 201
        data = first.json()
        assert data["userId"] == user_id
        assert data["eventId"] == event_id
        assert data["status"] == "yes"

        second = await client.post("/api/v1/rsvps", json=body)
        assert second.status_code == 400
        assert second.json()["detail"] == "Already RSVPed"

        assert (await client.get(f"/api/v1/events/{event_id}")).json()["attendeeCount"] == 1

    async def test_create_for_unknown_event(self, client: AsyncClient, test_student):
        response = await client.post(
            "/api/v1/rsvps", json={"userId": str(test_student.id), "eventId": str(uuid4())}
        )

        assert response.status_code == 404

    async def test_list_user_rsvps(self, client: AsyncClient, test_events, test_student):
        user_id = str(test_student.id)
        for event in test_events[:3]:
            await client.post(f"/api/v1/events/{event.id}/rsvp", json={"userId": user_id})

        response = await client.get(f"/api/v1/rsvps/{user_id}")

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 3
        assert {r["event"]["title"] for r in data} == {"Event 1", "Event 2", "Event 3"}

    async def test_list_for_user_without_rsvps(self, client: AsyncClient, test_student):
        response = await client.get(f"/api/v1/rsvps/{test_student.id}")

        assert response.status_code == 200
        assert response.json() == []

    async def test_list_malformed_user(self, client: AsyncClient):
        response = await client.get("/api/v1/rsvps/not-a-uuid")

        assert response.status_code == 400
