from httpx import AsyncClient

from tests.conftest import API, create_student, create_subject


async def _create_exam(client: AsyncClient, **overrides) -> dict:
    body = {
        "exam_code": "EX1",
        "name": "Midterm",
        "subject": "MATH",
        "grades": ["1"],
        "date": "2024-09-10",
        "time": "09:00",
        "duration": "2 hours",
        "total_marks": 50,
        "passing_marks": 17,
    }
    body.update(overrides)
    response = await client.post(f"{API}/exams", json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]["exam"]


class TestExams:
    async def test_subject_resolved_by_code(self, client: AsyncClient):
        subject = await create_subject(client, "MATH", "Mathematics")
        exam = await _create_exam(client)
        assert exam["subject"] == "Mathematics"
        assert exam["subject_id"] == subject["id"]
        assert exam["grades"] == ["Grade 1"]

    async def test_unknown_subject_kept_as_text(self, client: AsyncClient):
        exam = await _create_exam(client, subject="General Knowledge")
        assert exam["subject"] == "General Knowledge"
        assert exam["subject_id"] is None

    async def test_passing_marks_cannot_exceed_total(self, client: AsyncClient):
        response = await client.post(
            f"{API}/exams",
            json={"exam_code": "EX2", "name": "Quiz", "subject": "Art", "date": "2024-09-10",
                  "time": "09:00", "duration": "1 hour", "total_marks": 10, "passing_marks": 11},
        )
        assert response.status_code == 422

    async def test_bad_time_rejected(self, client: AsyncClient):
        response = await client.post(
            f"{API}/exams",
            json={"exam_code": "EX2", "name": "Quiz", "subject": "Art", "date": "2024-09-10",
                  "time": "9 o'clock", "duration": "1 hour", "total_marks": 10},
        )
        assert response.status_code == 400

    async def test_results_graded_and_upserted(self, client: AsyncClient):
        await create_student(client, "S001", "Asha", "Grade 1A")
        ben = await create_student(client, "S002", "Ben", "Grade 1A")
        await _create_exam(client)

        response = await client.post(
            f"{API}/exams/EX1/results",
            json={"results": [
                {"student_id": "S001", "marks_obtained": 45},
                {"student_id": ben["id"], "marks_obtained": 10},
            ]},
        )
        assert response.status_code == 200, response.text
        results = {r["student_code"]: r for r in response.json()["data"]["results"]}
        assert (results["S001"]["percentage"], results["S001"]["grade"], results["S001"]["status"]) == (90.0, "A+", "Pass")
        assert (results["S002"]["grade"], results["S002"]["status"]) == ("F", "Fail")

        await client.post(
            f"{API}/exams/EX1/results",
            json={"results": [{"student_id": "S002", "marks_obtained": 20, "grade": "C", "status": "Passed"}]},
        )
        listing = await client.get(f"{API}/exams/EX1/results")
        body = listing.json()
        assert body["count"] == 2
        ben_row = body["data"]["results"][1]
        assert (ben_row["student_code"], ben_row["grade"], ben_row["status"]) == ("S002", "C", "Pass")

    async def test_marks_above_total_reject_batch(self, client: AsyncClient):
        await create_student(client, "S001", "Asha", "Grade 1A")
        await create_student(client, "S002", "Ben", "Grade 1A")
        await _create_exam(client)

        response = await client.post(
            f"{API}/exams/EX1/results",
            json={"results": [
                {"student_id": "S001", "marks_obtained": 40},
                {"student_id": "S002", "marks_obtained": 51},
            ]},
        )
        assert response.status_code == 400
        assert (await client.get(f"{API}/exams/EX1/results")).json()["count"] == 0


class TestFees:
    async def test_lookup_by_bare_grade_number(self, client: AsyncClient):
        response = await client.post(f"{API}/fees", json={"grade": "3", "tuition_fee": 1200, "admission_fee": 300.5})
        assert response.status_code == 201
        assert response.json()["data"]["fee"]["grade"] == "Grade 3"

        by_grade = await client.get(f"{API}/fees/grade/3")
        assert by_grade.status_code == 200
        assert by_grade.json()["data"]["fee"]["admission_fee"] == 300.5

        by_id = await client.get(f"{API}/fees/3")
        assert by_id.json()["data"]["fee"]["grade"] == "Grade 3"

    async def test_one_fee_per_grade(self, client: AsyncClient):
        await client.post(f"{API}/fees", json={"grade": "Grade 3", "tuition_fee": 1, "admission_fee": 1})
        response = await client.post(f"{API}/fees", json={"grade": "3", "tuition_fee": 2, "admission_fee": 2})
        assert response.status_code == 409

    async def test_listing_sorted_by_grade_number(self, client: AsyncClient):
        for grade in ("10", "2", "1"):
            await client.post(f"{API}/fees", json={"grade": grade, "tuition_fee": 1, "admission_fee": 1})
        response = await client.get(f"{API}/fees")
        assert [f["grade"] for f in response.json()["data"]["fees"]] == ["Grade 1", "Grade 2", "Grade 10"]
