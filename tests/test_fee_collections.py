from decimal import Decimal

from httpx import AsyncClient

from schoolms.api.v1.fee_collections.service import new_receipt_number, payment_status
from schoolms.core.enums import PaymentStatus
from tests.conftest import API, create_student


async def _collect(client: AsyncClient, **overrides) -> dict:
    body = {"student_id": "S1", "fee_type": "Tuition", "amount": 1000, "payment_method": "Cash"}
    body.update(overrides)
    response = await client.post(f"{API}/fee-collections", json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]["collection"]


def test_payment_status_follows_paid_against_amount():
    assert payment_status(Decimal("100"), Decimal("0")) is PaymentStatus.UNPAID
    assert payment_status(Decimal("100"), Decimal("40")) is PaymentStatus.PARTIAL
    assert payment_status(Decimal("100"), Decimal("100")) is PaymentStatus.PAID


def test_receipt_numbers_are_prefixed():
    number = new_receipt_number()
    assert number.startswith("RCP")
    assert number[3:].isdigit() and len(number) == 14


class TestFeeCollections:
    async def test_collect_with_explicit_amount(self, client: AsyncClient):
        student = await create_student(client, "S1", "Ann", "Grade 3A")
        collection = await _collect(client, paid_amount=250, receipt_number="R-1")
        assert collection["status"] == "Partial"
        assert collection["balance"] == 750
        assert collection["student_id"] == student["id"]
        assert collection["student"]["student_code"] == "S1"

        by_receipt = await client.get(f"{API}/fee-collections/R-1")
        assert by_receipt.status_code == 200
        assert by_receipt.json()["data"]["collection"]["id"] == collection["id"]

    async def test_amount_defaults_to_grade_fee(self, client: AsyncClient):
        await create_student(client, "S1", "Ann", "Grade 3A")
        await client.post(f"{API}/fees", json={"grade": "3", "tuition_fee": 1200, "admission_fee": 300})

        tuition = await _collect(client, amount=None)
        admission = await _collect(client, amount=None, fee_type="Admission")
        assert tuition["amount"] == 1200
        assert admission["amount"] == 300
        assert tuition["status"] == "Unpaid"
        assert tuition["receipt_number"].startswith("RCP")

    async def test_other_fee_needs_amount(self, client: AsyncClient):
        await create_student(client, "S1", "Ann", "Grade 3A")
        response = await client.post(
            f"{API}/fee-collections", json={"student_id": "S1", "fee_type": "Other", "payment_method": "Cash"}
        )
        assert response.status_code == 400

    async def test_unknown_student_rejected(self, client: AsyncClient):
        response = await client.post(
            f"{API}/fee-collections",
            json={"student_id": "NOPE", "fee_type": "Tuition", "amount": 10, "payment_method": "Cash"},
        )
        assert response.status_code == 400

    async def test_paid_cannot_exceed_amount(self, client: AsyncClient):
        await create_student(client, "S1", "Ann", "Grade 3A")
        response = await client.post(
            f"{API}/fee-collections",
            json={"student_id": "S1", "fee_type": "Tuition", "amount": 100, "paid_amount": 150, "payment_method": "Cash"},
        )
        assert response.status_code == 400

    async def test_duplicate_receipt_conflicts(self, client: AsyncClient):
        await create_student(client, "S1", "Ann", "Grade 3A")
        await _collect(client, receipt_number="R-1")
        response = await client.post(
            f"{API}/fee-collections",
            json={"student_id": "S1", "fee_type": "Tuition", "amount": 5, "payment_method": "Cash", "receipt_number": "R-1"},
        )
        assert response.status_code == 409

    async def test_payments_move_status_to_paid(self, client: AsyncClient):
        await create_student(client, "S1", "Ann", "Grade 3A")
        collection = await _collect(client, receipt_number="R-1")
        assert collection["status"] == "Unpaid"

        first = await client.post(f"{API}/fee-collections/R-1/payments", json={"amount": 400})
        assert first.status_code == 200, first.text
        assert first.json()["data"]["collection"]["status"] == "Partial"

        too_much = await client.post(f"{API}/fee-collections/R-1/payments", json={"amount": 601})
        assert too_much.status_code == 400
        assert "remaining balance" in too_much.json()["detail"]

        rest = await client.post(
            f"{API}/fee-collections/R-1/payments", json={"amount": 600, "payment_method": "Online"}
        )
        settled = rest.json()["data"]["collection"]
        assert settled["status"] == "Paid"
        assert settled["balance"] == 0
        assert settled["payment_method"] == "Online"

    async def test_update_recomputes_status(self, client: AsyncClient):
        await create_student(client, "S1", "Ann", "Grade 3A")
        await _collect(client, receipt_number="R-1", paid_amount=500)
        response = await client.put(f"{API}/fee-collections/R-1", json={"amount": 500})
        assert response.json()["data"]["collection"]["status"] == "Paid"

        lowered = await client.put(f"{API}/fee-collections/R-1", json={"amount": 100})
        assert lowered.status_code == 400

    async def test_filters_and_summary(self, client: AsyncClient):
        await create_student(client, "S1", "Ann", "Grade 3A")
        await create_student(client, "S2", "Ben", "Grade 3A")
        await _collect(client, receipt_number="R-1", paid_amount=1000)
        await _collect(client, receipt_number="R-2", student_id="S2", paid_amount=200)
        await _collect(client, receipt_number="R-3", student_id="S2", fee_type="Other", amount=50)

        by_student = await client.get(f"{API}/fee-collections", params={"student_id": "S2"})
        assert by_student.json()["count"] == 2

        partial = await client.get(f"{API}/fee-collections", params={"status": "Partial"})
        assert [c["receipt_number"] for c in partial.json()["data"]["collections"]] == ["R-2"]

        summary = (await client.get(f"{API}/fee-collections/summary")).json()["data"]["summary"]
        assert summary["total_amount"] == 2050
        assert summary["total_paid"] == 1200
        assert summary["total_outstanding"] == 850
        assert summary["by_status"] == {"Unpaid": 1, "Partial": 1, "Paid": 1}

    async def test_delete(self, client: AsyncClient):
        await create_student(client, "S1", "Ann", "Grade 3A")
        await _collect(client, receipt_number="R-1")
        response = await client.delete(f"{API}/fee-collections/R-1")
        assert response.status_code == 200
        missing = await client.get(f"{API}/fee-collections/R-1")
        assert missing.status_code == 404
        again = await client.delete(f"{API}/fee-collections/R-1")
        assert again.status_code == 404
