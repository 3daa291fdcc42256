"""
BharatQA API Client
===================
Async wrapper around the external BharatQA REST API.

Responsibilities:
    - Attach the x-api-key header on every endpoint except /health (public)
    - Normalize error responses into a raised ApiError with a readable message
    - Parse payloads into domain models at the boundary

Error message resolution (non-2xx):
    1. JSON body "error"
    2. JSON body "message"
    3. "Server error (<status>)"
    Non-JSON bodies (e.g. a proxy's 502 HTML page) become the message only
    when shorter than 200 characters.

No retries: a failed call is reported once and the caller decides.
"""
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from bharatqa.core.config import BHARATQA_API_KEY, BHARATQA_API_URL, REQUEST_TIMEOUT
from bharatqa.core.errors import ApiError
from bharatqa.models.admin_stats import AdminStats
from bharatqa.models.app_test import AppTest, AppTestStats
from bharatqa.models.bug_report import BugReport
from bharatqa.models.company import Company
from bharatqa.models.earnings import TesterEarnings

logger = logging.getLogger(__name__)

_MAX_TEXT_ERROR = 200


def handle_response(response: httpx.Response) -> Any:
    """Return the decoded JSON body or raise ApiError."""
    if not response.is_success:
        message = f"Server error ({response.status_code})"
        try:
            data = response.json()
            if isinstance(data, dict):
                message = data.get("error") or data.get("message") or message
        except ValueError:
            text = response.text.strip()
            if text and len(text) < _MAX_TEXT_ERROR:
                message = text
        raise ApiError(message, response.status_code)

    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise ApiError("Invalid JSON in API response", response.status_code) from exc


def _company_from(data: Any) -> Company:
    """Auth endpoints wrap the company in {"company": {...}} in newer versions."""
    if isinstance(data, dict) and isinstance(data.get("company"), dict):
        data = data["company"]
    try:
        return Company.model_validate(data)
    except ValidationError as exc:
        raise ApiError(f"Unexpected company payload: {exc.error_count()} invalid field(s)") from exc


def _as_list(data: Any, key: str) -> list:
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get(key), list):
        return data[key]
    return []


def _bugs_from(data: Any) -> List[BugReport]:
    bugs = []
    for item in _as_list(data, "bugs"):
        try:
            bugs.append(BugReport.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping malformed bug record: %s", exc.errors()[:1])
    return bugs


class BharatQAClient:
    """
    Thin async client for the BharatQA REST API.

    Usage:
        async with BharatQAClient() as client:
            tests = await client.get_tests(company_id)
    """

    def __init__(
        self,
        base_url: str = BHARATQA_API_URL,
        api_key: str = BHARATQA_API_KEY,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json", "User-Agent": "BharatQA-Dashboard"},
        )

    async def __aenter__(self) -> "BharatQAClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    @staticmethod
    def is_public(path: str) -> bool:
        return "/health" in path

    def _headers(self, path: str) -> Dict[str, str]:
        if self.is_public(path) or not self.api_key:
            return {}
        return {"x-api-key": self.api_key}

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = {**self._headers(path), **kwargs.pop("headers", {})}
        logger.debug("%s %s", method, path)
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("BharatQA API unreachable: %s %s: %s", method, path, exc)
            raise ApiError(f"Could not reach BharatQA API: {exc}") from exc

        try:
            return handle_response(response)
        except ApiError as err:
            logger.warning("%s %s failed (HTTP %s): %s", method, path, err.status_code, err.message)
            raise

    # ------------------------------------------------------------------
    # Auth / company
    # ------------------------------------------------------------------
    async def google_auth(self, credential: str) -> Company:
        data = await self._request("POST", "/auth/google", json={"credential": credential})
        return _company_from(data)

    async def get_company(self, company_id) -> Company:
        return _company_from(await self._request("GET", f"/auth/company/{company_id}"))

    async def update_company(self, company_id, data: Dict[str, Any]) -> Company:
        return _company_from(await self._request("PUT", f"/auth/company/{company_id}", json=data))

    async def delete_company(self, company_id) -> Any:
        return await self._request("DELETE", f"/auth/company/{company_id}")

    async def onboard_company(self, company_id, data: Dict[str, Any]) -> Company:
        return _company_from(await self._request("PUT", f"/auth/onboarding/{company_id}", json=data))

    async def get_company_unique_testers(self, company_id) -> Any:
        return await self._request("GET", f"/company/{company_id}/unique-testers")

    # ------------------------------------------------------------------
    # Tests
    # ------------------------------------------------------------------
    async def get_tests(self, company_id) -> List[AppTest]:
        data = await self._request("GET", f"/company/{company_id}/tests")
        tests = []
        for item in _as_list(data, "tests"):
            try:
                tests.append(AppTest.model_validate(item))
            except ValidationError as exc:
                logger.warning("Skipping malformed test record: %s", exc.errors()[:1])
        return tests

    async def create_test(
        self,
        fields: Dict[str, Any],
        apk_filename: Optional[str] = None,
        apk_content: Optional[bytes] = None,
    ) -> Any:
        """
        Multipart upload: form fields plus, when given, the APK under 'apk'.

        Fields are always sent as multipart parts so the backend sees the
        same encoding with or without a file.
        """
        parts: List[tuple] = []
        for key, value in fields.items():
            if value is None:
                continue
            if isinstance(value, (list, tuple)):
                value = ",".join(str(v) for v in value)
            parts.append((key, (None, str(value))))
        if apk_content:
            parts.append(
                ("apk", (apk_filename or "app.apk", apk_content, "application/vnd.android.package-archive"))
            )
        logger.info(
            "Creating test '%s' (%s)",
            fields.get("app_name", "?"),
            f"{len(apk_content)} bytes APK" if apk_content else "no APK",
        )
        return await self._request("POST", "/tests", files=parts)

    async def delete_test(self, test_id) -> Any:
        return await self._request("DELETE", f"/tests/{test_id}")

    async def get_test_stats(self, test_id) -> AppTestStats:
        data = await self._request("GET", f"/tests/{test_id}/stats")
        return AppTestStats.model_validate(data or {})

    def apk_download_url(self, test_id) -> str:
        return f"{self.base_url}/tests/{test_id}/download-apk"

    # ------------------------------------------------------------------
    # Bugs
    # ------------------------------------------------------------------
    async def get_bugs(self, test_id) -> List[BugReport]:
        return _bugs_from(await self._request("GET", f"/tests/{test_id}/bugs"))

    async def delete_bug(self, bug_id) -> Any:
        return await self._request("DELETE", f"/bugs/{bug_id}")

    async def analyze_with_ai(self, bug_id) -> Any:
        return await self._request("POST", f"/bugs/{bug_id}/analyze")

    # ------------------------------------------------------------------
    # Testers / admin
    # ------------------------------------------------------------------
    async def get_earnings(self, tester_name: str) -> TesterEarnings:
        data = await self._request("GET", f"/earnings/{quote(tester_name.strip(), safe='')}")
        earnings = TesterEarnings.model_validate(data if isinstance(data, dict) else {})
        if earnings.tester_name is None:
            earnings.tester_name = tester_name.strip()
        return earnings

    async def get_admin_stats(self) -> AdminStats:
        data = await self._request("GET", "/admin/stats")
        return AdminStats.model_validate(data if isinstance(data, dict) else {})

    async def get_all_bugs(self) -> List[BugReport]:
        """Every bug report on the platform, across companies."""
        return _bugs_from(await self._request("GET", "/admin/all-bugs"))

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------
    async def get_health(self) -> Any:
        return await self._request("GET", "/health")
