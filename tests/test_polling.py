import asyncio
import logging

from httpx import AsyncClient

from schoolms.client.api_client import SchoolApiClient
from schoolms.client.polling import CollectionPoller
from tests.conftest import create_student


class TestCollectionPoller:
    async def test_refreshes_on_interval(self):
        calls = []

        async def fetch():
            calls.append(len(calls))
            return list(calls)

        seen = []
        async with CollectionPoller(fetch, interval=0.01, on_result=seen.append) as poller:
            await asyncio.sleep(0.06)
            assert poller.running
        assert not poller.running
        assert poller.refresh_count >= 2
        assert poller.latest == seen[-1]

    async def test_stop_cancels_inflight_refresh(self):
        started = asyncio.Event()

        async def slow_fetch():
            started.set()
            await asyncio.sleep(10)
            return ["late"]

        poller = CollectionPoller(slow_fetch, interval=60)
        poller.start()
        await asyncio.wait_for(started.wait(), timeout=1)
        await poller.stop()
        assert poller.latest is None
        assert poller.refresh_count == 0

    async def test_without_immediate_fetch_waits_for_interval(self):
        async def fetch():
            return ["x"]

        async with CollectionPoller(fetch, interval=60, fetch_immediately=False) as poller:
            await asyncio.sleep(0.01)
            assert poller.refresh_count == 0
            await poller.refresh_now()
            assert poller.latest == ["x"]

    async def test_failures_are_logged_and_polling_continues(self, caplog):
        attempts = []

        async def flaky():
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("backend down")
            return ["ok"]

        with caplog.at_level(logging.WARNING, logger="schoolms.client.polling"):
            async with CollectionPoller(flaky, interval=0.01) as poller:
                await asyncio.sleep(0.05)
        assert "backend down" in caplog.text
        assert poller.latest == ["ok"]

    async def test_polls_student_list(self, client: AsyncClient, api_client: SchoolApiClient):
        await create_student(client, "S001", "Asha", "Grade 1A")

        async with CollectionPoller(lambda: api_client.list_students(status="Active"), interval=60) as poller:
            await asyncio.sleep(0)
            while poller.refresh_count == 0:
                await asyncio.sleep(0.01)
        assert [s["student_code"] for s in poller.latest] == ["S001"]


async def test_failing_result_handler_is_logged(caplog):
    async def fetch():
        return ["x"]

    def explode(result):
        raise ValueError("render failed")

    with caplog.at_level(logging.WARNING, logger="schoolms.client.polling"):
        async with CollectionPoller(fetch, interval=0.01, on_result=explode) as poller:
            await asyncio.sleep(0.05)
            assert poller.running
    assert "render failed" in caplog.text
    assert poller.refresh_count >= 2
