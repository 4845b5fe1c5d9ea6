import io

from httpx import AsyncClient
from openpyxl import load_workbook

from tests.conftest import API, create_student

CLASS = "Grade 1 Section A"


async def _mark(client: AsyncClient, on: str, marks, class_name: str = CLASS):
    return await client.post(
        f"{API}/attendance",
        json={
            "class_name": class_name,
            "date": on,
            "students": [{"student_id": sid, "status": st} for sid, st in marks],
        },
    )


class TestAttendanceApi:
    async def test_create_resolves_codes_and_object_ids(self, client: AsyncClient):
        asha = await create_student(client, "S001", "Asha", CLASS)
        await create_student(client, "S002", "Ben", CLASS)

        response = await _mark(client, "2024-06-03", [(asha["id"], "Present"), ("S002", "Excused")])
        assert response.status_code == 201, response.text
        doc = response.json()["data"]["attendance"]
        assert doc["class_name"] == CLASS
        assert sorted((m["student_code"], m["status"]) for m in doc["students"]) == [("S001", "Present"), ("S002", "Excused")]

    async def test_second_create_same_class_and_date_conflicts(self, client: AsyncClient):
        asha = await create_student(client, "S001", "Asha", CLASS)
        assert (await _mark(client, "2024-06-03", [(asha["id"], "Present")])).status_code == 201

        response = await _mark(client, "2024-06-03", [(asha["id"], "Absent")])
        assert response.status_code == 409
        assert response.json()["detail"] == "Attendance already marked for this class on this date"

        other_day = await _mark(client, "2024-06-04", [(asha["id"], "Absent")])
        assert other_day.status_code == 201

    async def test_update_replaces_marks(self, client: AsyncClient):
        asha = await create_student(client, "S001", "Asha", CLASS)
        ben = await create_student(client, "S002", "Ben", CLASS)
        created = (await _mark(client, "2024-06-03", [(asha["id"], "Present"), (ben["id"], "Present")])).json()

        doc_id = created["data"]["attendance"]["id"]
        response = await client.put(
            f"{API}/attendance/{doc_id}",
            json={"students": [{"student_id": ben["id"], "status": "Late", "remarks": "bus"}]},
        )
        assert response.status_code == 200
        marks = response.json()["data"]["attendance"]["students"]
        assert marks == [
            {"student_id": ben["id"], "student_code": "S002", "student_name": "Ben", "status": "Late", "remarks": "bus"}
        ]

    async def test_unknown_student_rejects_whole_batch(self, client: AsyncClient):
        asha = await create_student(client, "S001", "Asha", CLASS)
        response = await _mark(client, "2024-06-03", [(asha["id"], "Present"), ("S999", "Present")])
        assert response.status_code == 400
        listing = await client.get(f"{API}/attendance", params={"class": CLASS})
        assert listing.json()["count"] == 0

    async def test_student_filter_narrows_marks(self, client: AsyncClient):
        asha = await create_student(client, "S001", "Asha", CLASS)
        ben = await create_student(client, "S002", "Ben", CLASS)
        await _mark(client, "2024-06-03", [(asha["id"], "Present"), (ben["id"], "Absent")])
        await _mark(client, "2024-06-04", [(asha["id"], "Late")])

        response = await client.get(f"{API}/attendance", params={"student_id": "S002"})
        body = response.json()
        assert body["count"] == 1
        assert body["data"]["attendance"][0]["students"][0]["status"] == "Absent"

        by_date = await client.get(f"{API}/attendance", params={"class": CLASS, "date": "2024-06-04"})
        assert by_date.json()["count"] == 1

    async def test_placeholder_document_id(self, client: AsyncClient):
        response = await client.get(f"{API}/attendance/null")
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid attendance ID provided"

    async def test_delete(self, client: AsyncClient):
        asha = await create_student(client, "S001", "Asha", CLASS)
        doc = (await _mark(client, "2024-06-03", [(asha["id"], "Present")])).json()["data"]["attendance"]
        assert (await client.delete(f"{API}/attendance/{doc['id']}")).status_code == 200
        assert (await client.get(f"{API}/attendance/{doc['id']}")).status_code == 404

    async def test_export_workbook(self, client: AsyncClient):
        asha = await create_student(client, "S001", "Asha", CLASS)
        ben = await create_student(client, "S002", "Ben", CLASS)
        await _mark(client, "2024-06-03", [(asha["id"], "Present"), (ben["id"], "Absent")])
        await _mark(client, "2024-06-04", [(asha["id"], "Excused"), (ben["id"], "Present")])

        response = await client.get(f"{API}/attendance/export", params={"class": CLASS})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )

        ws = load_workbook(io.BytesIO(response.content)).active
        rows = [list(r) for r in ws.iter_rows(values_only=True)]
        assert rows[0] == ["Student ID", "Name", "2024-06-03", "2024-06-04", "Present", "Absent", "Late", "Excused"]
        assert rows[1] == ["S001", "Asha", "P", "E", 1, 0, 0, 1]
        assert rows[2] == ["S002", "Ben", "A", "P", 1, 1, 0, 0]
