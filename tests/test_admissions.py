from httpx import AsyncClient

from schoolms.api.v1.admissions.service import clean_section
from tests.conftest import API, create_student


def _application(**overrides) -> dict:
    body = {
        "first_name": "Mira",
        "last_name": "Osei",
        "email": "Mira@Example.com",
        "phone": "555-0101",
        "class_name": "Grade 3",
        "date_of_birth": "2016-04-02",
        "gender": "Female",
        "admission_date": "2024-09-01",
        "parent_name": "Kofi Osei",
        "parent_phone": "555-0100",
    }
    body.update(overrides)
    return body


async def _submit(client: AsyncClient, **overrides) -> dict:
    response = await client.post(f"{API}/admissions", json=_application(**overrides))
    assert response.status_code == 201, response.text
    return response.json()["data"]["admission"]


async def _create_class(client: AsyncClient, code: str, name: str, capacity: int = 30) -> dict:
    response = await client.post(f"{API}/classes", json={"code": code, "name": name, "capacity": capacity})
    assert response.status_code == 201, response.text
    return response.json()["data"]["class"]


def test_clean_section_strips_prefix():
    assert clean_section("Sec b") == "B"
    assert clean_section("Section A") == "A"
    assert clean_section("c") == "C"
    assert clean_section("  ") is None
    assert clean_section(None) is None


class TestAdmissions:
    async def test_submit_starts_pending(self, client: AsyncClient):
        admission = await _submit(client)
        assert admission["admission_code"] == "ADM000001"
        assert admission["status"] == "Pending"
        assert admission["grade"] == "Grade 3"
        assert admission["name"] == "Mira Osei"
        assert admission["email"] == "mira@example.com"

        second = await _submit(client, first_name="Noor")
        assert second["admission_code"] == "ADM000002"

    async def test_class_must_name_a_grade(self, client: AsyncClient):
        response = await client.post(f"{API}/admissions", json=_application(class_name="Kindergarten"))
        assert response.status_code == 400

    async def test_list_by_status(self, client: AsyncClient):
        await _submit(client)
        rejected = await _submit(client, first_name="Noor")
        await client.post(f"{API}/admissions/{rejected['admission_code']}/reject", json={"remarks": "Late"})

        pending = await client.get(f"{API}/admissions/status/Pending")
        assert [a["first_name"] for a in pending.json()["data"]["admissions"]] == ["Mira"]

        by_query = await client.get(f"{API}/admissions", params={"status": "Rejected"})
        assert by_query.json()["count"] == 1
        assert by_query.json()["data"]["admissions"][0]["remarks"] == "Late"

        bad = await client.get(f"{API}/admissions/status/Waiting")
        assert bad.status_code == 422

    async def test_approve_needs_section(self, client: AsyncClient):
        await _create_class(client, "C3B", "Grade 3 Section B")
        admission = await _submit(client)
        response = await client.post(f"{API}/admissions/{admission['id']}/approve", json={})
        assert response.status_code == 400
        assert "section" in response.json()["detail"]

    async def test_approve_needs_matching_active_class(self, client: AsyncClient):
        await _create_class(client, "C3A", "Grade 3 Section A")
        admission = await _submit(client, section="B")
        response = await client.post(f"{API}/admissions/{admission['id']}/approve", json={})
        assert response.status_code == 400
        assert "Grade 3 Section B" in response.json()["detail"]

    async def test_approve_rejects_full_class(self, client: AsyncClient):
        await _create_class(client, "C3B", "Grade 3 Section B", capacity=1)
        await create_student(client, "S1", "Ann", "Grade 3B")
        admission = await _submit(client, section="B")
        response = await client.post(f"{API}/admissions/{admission['id']}/approve", json={})
        assert response.status_code == 400
        assert "full capacity" in response.json()["detail"]

    async def test_approve_enrols_student(self, client: AsyncClient):
        await _create_class(client, "C3B", "Grade 3 Section B")
        admission = await _submit(client)
        response = await client.post(
            f"{API}/admissions/{admission['admission_code']}/approve", json={"section": "Sec b"}
        )
        assert response.status_code == 200, response.text
        approved = response.json()["data"]["admission"]
        assert approved["status"] == "Approved"
        assert approved["section"] == "B"

        student = (await client.get(f"{API}/students/ADM000001")).json()["data"]["student"]
        assert student["id"] == approved["student_id"]
        assert student["class_name"] == "Grade 3B"
        assert student["section"] == "B"
        assert student["parent_name"] == "Kofi Osei"

        cls = (await client.get(f"{API}/classes/C3B")).json()["data"]["class"]
        assert cls["current_students"] == 1

        again = await client.post(f"{API}/admissions/{admission['id']}/approve", json={})
        assert again.status_code == 400

    async def test_section_in_class_name_is_enough(self, client: AsyncClient):
        await _create_class(client, "C3B", "Grade 3 Section B")
        admission = await _submit(client, class_name="Grade 3B")
        response = await client.post(
            f"{API}/admissions/{admission['id']}/approve", json={"student_code": "S100"}
        )
        assert response.status_code == 200, response.text
        assert (await client.get(f"{API}/students/S100")).status_code == 200

    async def test_approve_with_taken_student_code_conflicts(self, client: AsyncClient):
        await _create_class(client, "C3B", "Grade 3 Section B")
        await create_student(client, "S1", "Ann", "Grade 3B")
        admission = await _submit(client, section="B")
        response = await client.post(
            f"{API}/admissions/{admission['id']}/approve", json={"student_code": "S1"}
        )
        assert response.status_code == 409
        unchanged = await client.get(f"{API}/admissions/{admission['id']}")
        assert unchanged.json()["data"]["admission"]["status"] == "Pending"

    async def test_reject_only_pending(self, client: AsyncClient):
        admission = await _submit(client)
        first = await client.post(f"{API}/admissions/{admission['id']}/reject", json={})
        assert first.json()["data"]["admission"]["status"] == "Rejected"
        second = await client.post(f"{API}/admissions/{admission['id']}/reject", json={})
        assert second.status_code == 400

    async def test_placement_fixed_after_approval(self, client: AsyncClient):
        await _create_class(client, "C3B", "Grade 3 Section B")
        admission = await _submit(client, section="B")
        await client.post(f"{API}/admissions/{admission['id']}/approve", json={})

        moved = await client.put(f"{API}/admissions/{admission['id']}", json={"class_name": "Grade 4"})
        assert moved.status_code == 400
        edited = await client.put(f"{API}/admissions/{admission['id']}", json={"phone": "555-0199"})
        assert edited.json()["data"]["admission"]["phone"] == "555-0199"

    async def test_get_and_delete(self, client: AsyncClient):
        admission = await _submit(client)
        response = await client.delete(f"{API}/admissions/ADM000001")
        assert response.status_code == 200
        missing = await client.get(f"{API}/admissions/{admission['id']}")
        assert missing.status_code == 404
