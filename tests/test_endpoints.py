"""
Endpoint Tests
==============
FastAPI routes with the upstream client replaced by mocks: no network.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient

from bharatqa.agents.analysis_monitor import AnalysisMonitor
from bharatqa.api.deps import get_client, get_monitor, get_session_store
from bharatqa.core.errors import ApiError
from bharatqa.models.admin_stats import AdminStats
from bharatqa.models.app_test import AppTest, AppTestStats
from bharatqa.models.bug_report import BugReport
from bharatqa.models.company import Company
from bharatqa.models.earnings import TesterEarnings
from bharatqa.session.store import SessionStore
from main import app


def _bug(**fields):
    return BugReport.model_validate({"id": 1, "bug_title": "Crash", **fields})


@pytest.fixture
def upstream():
    client = MagicMock()
    for name in (
        "google_auth", "get_company", "update_company", "delete_company", "onboard_company",
        "get_company_unique_testers", "get_tests", "create_test", "delete_test",
        "get_test_stats", "get_bugs", "delete_bug", "analyze_with_ai", "get_health",
        "get_earnings", "get_admin_stats", "get_all_bugs",
    ):
        setattr(client, name, AsyncMock())
    client.apk_download_url = MagicMock(return_value="https://qa.example.com/api/tests/1/download-apk")
    return client


@pytest.fixture
def store():
    return SessionStore(path=None)


@pytest.fixture
def http(upstream, store):
    app.dependency_overrides[get_client] = lambda: upstream
    app.dependency_overrides[get_session_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


# ===================================================================
# Health
# ===================================================================
def test_health(http):
    assert http.get("/health").json() == {"status": "ok"}


def test_upstream_health_never_fails(http, upstream):
    upstream.get_health.side_effect = ApiError("Could not reach BharatQA API")
    resp = http.get("/api/upstream-health")
    assert resp.status_code == 200
    assert resp.json()["connected"] is False


# ===================================================================
# Session
# ===================================================================
def test_login_replaces_session(http, upstream, store):
    upstream.google_auth.return_value = Company(id=7, name="Acme")
    resp = http.post("/api/session/login", json={"credential": "jwt"})
    assert resp.status_code == 200
    assert store.current.id == 7
    assert http.get("/api/session").json()["name"] == "Acme"


def test_session_requires_login(http):
    assert http.get("/api/session").status_code == 401


def test_onboarding_merges(http, upstream, store):
    store.write({"id": 7, "name": "Acme", "email": "ops@acme.in"})
    upstream.onboard_company.return_value = Company(id=7, industry="Fintech", company_size="2-10")

    resp = http.put("/api/session/onboarding", json={
        "name": "Acme", "industry": "Fintech", "company_size": "2-10", "role": "Developer",
    })

    assert resp.status_code == 200
    assert store.current.email == "ops@acme.in"
    assert store.current.industry == "Fintech"
    assert store.current.onboarded is True


def test_login_upstream_rejection_keeps_status(http, upstream):
    upstream.google_auth.side_effect = ApiError("Invalid credential", 400)
    resp = http.post("/api/session/login", json={"credential": "bad"})
    assert resp.status_code == 400
    assert "Invalid credential" in resp.json()["detail"]


# ===================================================================
# Tests & bugs
# ===================================================================
def test_list_tests_upstream_down_is_502(http, upstream):
    upstream.get_tests.side_effect = ApiError("Server error (500)", 500)
    resp = http.get("/api/company/c1/tests")
    assert resp.status_code == 502
    assert resp.json()["detail"] == "Failed to load tests: Server error (500)"


def test_list_bugs_presents_view_models(http, upstream):
    upstream.get_bugs.return_value = [
        _bug(device_stats='{"battery_start":90,"battery_end":84}', severity="high"),
    ]
    resp = http.get("/api/tests/t1/bugs")
    assert resp.status_code == 200
    body = resp.json()
    assert body[0]["title"] == "Crash"
    assert body[0]["severity_color"] == "#F5A623"
    assert {"label": "Battery", "value": "90% → 84% (6% drain)"} in body[0]["device"]


def test_create_test_requires_session(http):
    resp = http.post(
        "/api/tests",
        data={"app_name": "Shop", "test_instructions": "Try checkout"},
        files={"apk": ("shop.apk", b"PK", "application/octet-stream")},
    )
    assert resp.status_code == 401


def test_create_test_forwards_upload(http, upstream, store):
    store.write({"id": 7, "name": "Acme"})
    upstream.create_test.return_value = {"id": 99}

    resp = http.post(
        "/api/tests",
        data={
            "app_name": " Shop ",
            "app_package": "com.example.shop",
            "test_instructions": "Add to cart, then pay with UPI",
            "priority": "HIGH",
            "target_devices": "budget",
        },
        files={"apk": ("shop.apk", b"PK\x03\x04", "application/octet-stream")},
    )

    assert resp.status_code == 200
    fields, filename, content = upstream.create_test.await_args.args
    assert fields == {
        "company_id": 7,
        "app_name": "Shop",
        "app_package": "com.example.shop",
        "test_instructions": "Add to cart, then pay with UPI",
        "target_devices": "budget",
        "priority": "high",
    }
    assert filename == "shop.apk"
    assert content == b"PK\x03\x04"


def test_create_test_without_apk_uses_defaults(http, upstream, store):
    store.write({"id": 7})
    upstream.create_test.return_value = {"id": 100}

    resp = http.post("/api/tests", data={"app_name": "Shop", "test_instructions": "Explore"})

    assert resp.status_code == 200
    fields, filename, content = upstream.create_test.await_args.args
    assert fields["priority"] == "normal"
    assert fields["target_devices"] == "all"
    assert filename is None
    assert content is None


@pytest.mark.parametrize("form", [
    {"app_name": "Shop", "test_instructions": "   "},
    {"app_name": "Shop", "test_instructions": "Explore", "priority": "urgent"},
    {"app_name": "Shop", "test_instructions": "Explore", "target_devices": "tablets"},
])
def test_create_test_rejects_invalid_form(http, upstream, store, form):
    store.write({"id": 7})
    resp = http.post("/api/tests", data=form)
    assert resp.status_code == 422
    upstream.create_test.assert_not_awaited()


def test_stats_and_delete(http, upstream):
    upstream.get_test_stats.return_value = AppTestStats(total_bugs=3, total_testers=2)
    assert http.get("/api/tests/t1/stats").json()["total_bugs"] == 3
    assert http.delete("/api/bugs/b1").json() == {"status": "deleted", "bug_id": "b1"}
    upstream.delete_bug.assert_awaited_once_with("b1")


# ===================================================================
# AI analysis
# ===================================================================
def test_analyze_completes(http, upstream):
    upstream.get_bugs.side_effect = [[_bug()], [_bug(ai_analysis="ANR in onCreate")]]
    resp = http.post("/api/tests/t1/bugs/1/analyze")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "completed"
    assert body["analysis"] == "ANR in onCreate"
    upstream.analyze_with_ai.assert_awaited_once_with(1)


def test_analyze_twice_is_conflict(http, upstream):
    upstream.get_bugs.return_value = [_bug(ai_analysis="done")]
    resp = http.post("/api/tests/t1/bugs/1/analyze")
    assert resp.status_code == 409
    upstream.analyze_with_ai.assert_not_awaited()


def test_analyze_unknown_bug(http, upstream):
    upstream.get_bugs.return_value = []
    assert http.post("/api/tests/t1/bugs/5/analyze").status_code == 404


def test_analyze_timeout_reports_message(http, upstream):
    upstream.get_bugs.return_value = [_bug()]
    app.dependency_overrides[get_monitor] = lambda: AnalysisMonitor(upstream, interval=0, max_attempts=2)
    resp = http.post("/api/tests/t1/bugs/1/analyze")
    assert resp.status_code == 200
    assert resp.json()["status"] == "timeout"
    assert "Refresh" in resp.json()["message"]


# ===================================================================
# Reports
# ===================================================================
def test_company_reports(http, upstream):
    upstream.get_tests.return_value = [AppTest(id=1, app_name="Shop", critical_count=1)]
    upstream.get_bugs.return_value = [_bug(ai_analysis="x"), _bug(id=2)]
    body = http.get("/api/company/c1/reports").json()
    assert body["summary"] == {"total_bugs": 2, "critical_bugs": 1, "analyzed_bugs": 1}
    assert body["reports"][0]["app_name"] == "Shop"


def test_reports_csv(http, upstream):
    upstream.get_tests.return_value = [AppTest(id=1, app_name="Shop")]
    upstream.get_bugs.return_value = [_bug()]
    resp = http.get("/api/company/c1/reports.csv")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "Crash,Shop,Anonymous" in resp.text


def test_text_report_unknown_test(http, upstream):
    upstream.get_tests.return_value = [AppTest(id=1, app_name="Shop")]
    assert http.get("/api/company/c1/tests/9/report").status_code == 404


def test_text_report(http, upstream):
    upstream.get_tests.return_value = [AppTest(id=1, app_name="Bharat Shop", company_name="Acme")]
    upstream.get_bugs.return_value = [_bug()]
    resp = http.get("/api/company/c1/tests/1/report")
    assert resp.status_code == 200
    assert "BharatQA Test Report" in resp.text
    assert 'filename="Bharat_Shop-report.txt"' in resp.headers["content-disposition"]


def test_text_report_with_non_ascii_app_name(http, upstream):
    upstream.get_tests.return_value = [AppTest(id=1, app_name='भारत "Shop"')]
    upstream.get_bugs.return_value = [_bug()]
    resp = http.get("/api/company/c1/tests/1/report")
    assert resp.status_code == 200
    disposition = resp.headers["content-disposition"]
    assert 'filename="Shop_-report.txt"' in disposition
    assert "filename*=UTF-8''%E0%A4%AD" in disposition
    assert "App: भारत" in resp.text


def test_analyze_without_waiting(http, upstream):
    upstream.get_bugs.return_value = [_bug()]
    resp = http.post("/api/tests/t1/bugs/1/analyze?wait=false")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "requested"
    assert body["attempts"] == 0
    upstream.analyze_with_ai.assert_awaited_once_with(1)
    assert upstream.get_bugs.await_count == 1


# ===================================================================
# Admin & earnings
# ===================================================================
def test_admin_stats(http, upstream):
    upstream.get_admin_stats.return_value = AdminStats(total_tests=4, total_earnings=1250)
    body = http.get("/api/admin/stats").json()
    assert body["total_tests"] == 4
    assert body["total_earnings"] == 1250


def test_recent_bugs_newest_first_and_limited(http, upstream):
    upstream.get_all_bugs.return_value = [
        _bug(id=1, created_at="2026-01-01T00:00:00Z"),
        _bug(id=2, created_at="2026-03-01T00:00:00Z"),
        _bug(id=3, created_at="2026-02-01T00:00:00Z"),
    ]
    body = http.get("/api/admin/recent-bugs?limit=2").json()
    assert [b["id"] for b in body] == [2, 3]


def test_earnings_lookup(http, upstream):
    upstream.get_earnings.return_value = TesterEarnings.model_validate({
        "tester_name": "Ravi Kumar",
        "total_earned": 100,
        "pending_amount": 50,
        "tests_completed": 3,
        "earnings": [{"test_id": 1, "amount": "50", "status": "PAID"}],
    })
    resp = http.get("/api/earnings/Ravi Kumar")
    assert resp.status_code == 200
    body = resp.json()
    assert body["pending_amount"] == 50
    assert body["earnings"][0]["status"] == "paid"
    upstream.get_earnings.assert_awaited_once_with("Ravi Kumar")


def test_earnings_upstream_down(http, upstream):
    upstream.get_earnings.side_effect = ApiError("Server error (500)", 500)
    assert http.get("/api/earnings/Ravi").status_code == 502
