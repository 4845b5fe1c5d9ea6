from httpx import AsyncClient

from schoolms.core.config import Settings, settings
from tests.conftest import API, THREE_SLOTS, create_room, create_subject


def entry(day, slot="0"):
    return {"day": day, "start_time": "08:00", "end_time": "08:45", "room": "R1", "slot": slot}


class TestApp:
    async def test_health(self, client: AsyncClient):
        response = await client.get(f"{API}/health")
        assert response.status_code == 200
        assert response.json() == {"success": True, "status": "ok"}

    def test_settings_read_environment(self, monkeypatch):
        monkeypatch.setenv("ENFORCE_SCHEDULE_CONFLICTS", "false")
        monkeypatch.setenv("POLL_INTERVAL_SECONDS", "5")
        loaded = Settings()
        assert loaded.enforce_schedule_conflicts is False
        assert loaded.poll_interval_seconds == 5.0

    async def test_conflicts_allowed_when_enforcement_off(self, client: AsyncClient, monkeypatch):
        monkeypatch.setattr(settings, "enforce_schedule_conflicts", False)
        await create_room(client, "R1", slots=THREE_SLOTS)
        await create_subject(client, "MATH", "Mathematics", schedule=[entry("Monday")])
        science = await create_subject(client, "SCI", "Science", schedule=[entry("Monday")])
        assert science["schedule"][0]["room"] == "R1"

    async def test_grade_and_section_required_when_enforcing(self, client: AsyncClient):
        await create_room(client, "R1", slots=THREE_SLOTS)
        response = await client.post(
            f"{API}/subjects",
            json={"code": "ART", "name": "Art", "category": "Elective", "level": "Primary",
                  "schedule": [entry("Monday")]},
        )
        assert response.status_code == 400
        assert "grade and section" in response.json()["detail"]
