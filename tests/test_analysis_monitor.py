import pytest
import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

from bharatqa.agents.analysis_monitor import TIMEOUT_MESSAGE, AnalysisMonitor
from bharatqa.core.errors import AnalysisAlreadyPresentError, ApiError
from bharatqa.models.bug_report import BugReport


def _bug(bug_id=1, analysis=None):
    return BugReport.model_validate({"id": bug_id, "bug_title": "Crash", "ai_analysis": analysis})


@pytest.fixture
def client():
    mock = MagicMock()
    mock.get_bugs = AsyncMock()
    mock.analyze_with_ai = AsyncMock(return_value={"status": "started"})
    return mock


@pytest.fixture
def monitor(client):
    return AnalysisMonitor(client, interval=5.0, max_attempts=4)


def test_returns_once_analysis_appears(monitor, client):
    async def run_test():
        client.get_bugs.side_effect = [[_bug()], [_bug()], [_bug(analysis="Null intent extra")]]

        with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            result = await monitor.wait_for_analysis("t1", 1)

        assert result.status == "completed"
        assert result.analysis == "Null intent extra"
        assert result.attempts == 3
        assert mock_sleep.await_count == 2
        mock_sleep.assert_awaited_with(5.0)

    asyncio.run(run_test())


def test_gives_up_after_max_attempts(monitor, client):
    async def run_test():
        client.get_bugs.return_value = [_bug()]

        with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            result = await monitor.wait_for_analysis("t1", 1)

        assert result.status == "timeout"
        assert result.message == TIMEOUT_MESSAGE
        assert client.get_bugs.await_count == 4
        # no sleep after the final attempt
        assert mock_sleep.await_count == 3

    asyncio.run(run_test())


def test_server_errors_use_an_attempt_and_continue(monitor, client):
    async def run_test():
        client.get_bugs.side_effect = [
            ApiError("Server error (503)", 503),
            ApiError("Could not reach BharatQA API"),
            [_bug(analysis="done")],
        ]

        with patch("asyncio.sleep", new_callable=AsyncMock):
            result = await monitor.wait_for_analysis("t1", 1)

        assert result.status == "completed"
        assert result.attempts == 3

    asyncio.run(run_test())


def test_client_error_aborts(monitor, client):
    async def run_test():
        client.get_bugs.side_effect = ApiError("Invalid API key", 401)

        with patch("asyncio.sleep", new_callable=AsyncMock):
            result = await monitor.wait_for_analysis("t1", 1)

        assert result.status == "error"
        assert result.message == "Invalid API key"
        assert client.get_bugs.await_count == 1

    asyncio.run(run_test())


def test_missing_bug(monitor, client):
    async def run_test():
        client.get_bugs.return_value = [_bug(bug_id=2)]
        result = await monitor.wait_for_analysis("t1", 1)
        assert result.status == "not_found"

    asyncio.run(run_test())


def test_stop_cancels_polling(monitor, client):
    async def run_test():
        client.get_bugs.return_value = [_bug()]

        async def fake_sleep(_):
            monitor.stop()

        with patch("asyncio.sleep", side_effect=fake_sleep):
            result = await monitor.wait_for_analysis("t1", 1)

        assert result.status == "cancelled"
        assert client.get_bugs.await_count == 1
        assert monitor.get_timeline()[-1]["status"] == "cancelled"

    asyncio.run(run_test())


def test_timeline_records_status_changes_once(monitor, client):
    async def run_test():
        client.get_bugs.side_effect = [[_bug()], [_bug()], [_bug(analysis="ok")]]

        with patch("asyncio.sleep", new_callable=AsyncMock):
            await monitor.wait_for_analysis("t1", "1")

        statuses = [e["status"] for e in monitor.get_timeline()]
        assert statuses == ["pending", "completed"]

    asyncio.run(run_test())


def test_analysis_is_write_once(monitor, client):
    async def run_test():
        with pytest.raises(AnalysisAlreadyPresentError):
            await monitor.request_analysis(_bug(analysis="already here"))
        client.analyze_with_ai.assert_not_awaited()

    asyncio.run(run_test())


def test_analyze_requests_then_polls(monitor, client):
    async def run_test():
        client.get_bugs.return_value = [_bug(analysis="Root cause: ANR on main thread")]

        result = await monitor.analyze("t1", _bug())

        client.analyze_with_ai.assert_awaited_once_with(1)
        assert result.status == "completed"
        assert monitor.get_timeline()[0]["status"] == "requested"

    asyncio.run(run_test())


def test_stop_before_polling_starts_is_honoured(monitor, client):
    async def run_test():
        client.get_bugs.return_value = [_bug()]
        monitor.stop()

        with patch("asyncio.sleep", new_callable=AsyncMock):
            result = await monitor.wait_for_analysis("t1", 1)

        assert result.status == "cancelled"
        assert result.attempts == 0
        client.get_bugs.assert_not_awaited()

        monitor.reset()
        client.get_bugs.return_value = [_bug(analysis="ok")]
        assert (await monitor.wait_for_analysis("t1", 1)).status == "completed"

    asyncio.run(run_test())


def test_stop_during_request_skips_polling(monitor, client):
    async def run_test():
        async def request_then_leave(bug_id):
            monitor.stop()
            return {"status": "started"}

        client.analyze_with_ai.side_effect = request_then_leave
        client.get_bugs.return_value = [_bug()]

        result = await monitor.analyze("t1", _bug())

        assert result.status == "cancelled"
        client.get_bugs.assert_not_awaited()

    asyncio.run(run_test())


def test_cached_analysis_checks_once(monitor, client):
    async def run_test():
        client.analyze_with_ai.return_value = {"cached": True}
        client.get_bugs.return_value = [_bug()]

        with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            result = await monitor.analyze("t1", _bug())

        assert result.status == "timeout"
        assert client.get_bugs.await_count == 1
        mock_sleep.assert_not_awaited()

    asyncio.run(run_test())
