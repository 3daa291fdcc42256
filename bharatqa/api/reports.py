"""
Reports Endpoints
=================
GET /api/company/{company_id}/reports                     summary + newest-first bugs
GET /api/company/{company_id}/reports.csv                 CSV export of the same table
GET /api/company/{company_id}/tests/{test_id}/report      plain-text test report
"""
import logging
import os
import re
from dataclasses import asdict
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from bharatqa.api.deps import get_client, raise_upstream
from bharatqa.client.api_client import BharatQAClient
from bharatqa.core.errors import ApiError
from bharatqa.services.bug_presenter import present_bug
from bharatqa.services.report_exporter import (
    build_csv_report,
    build_text_report,
    collect_company_reports,
    report_filename,
    summarize_reports,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/company", tags=["Reports"])

_UNSAFE_FILENAME = re.compile(r'[^A-Za-z0-9._-]+')


def attachment_header(filename: str) -> str:
    """
    Content-Disposition value that survives any app name.

    Headers are latin-1 on the wire, so non-ASCII names go in filename*
    (RFC 5987) next to an ASCII-only filename for older clients.
    """
    stem, ext = os.path.splitext(filename)
    fallback = (_UNSAFE_FILENAME.sub("_", stem).strip("_") or "report") + _UNSAFE_FILENAME.sub("", ext)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


@router.get("/{company_id}/reports")
async def company_reports(company_id: str, client: BharatQAClient = Depends(get_client)):
    try:
        tests, reports = await collect_company_reports(client, company_id)
    except ApiError as err:
        raise_upstream(err, "Failed to load reports")
    return {
        "summary": asdict(summarize_reports(tests, reports)),
        "reports": [present_bug(r) for r in reports],
    }


@router.get("/{company_id}/reports.csv", response_class=PlainTextResponse)
async def company_reports_csv(company_id: str, client: BharatQAClient = Depends(get_client)):
    try:
        _, reports = await collect_company_reports(client, company_id)
    except ApiError as err:
        raise_upstream(err, "Failed to export reports")
    return PlainTextResponse(
        build_csv_report(reports),
        media_type="text/csv",
        headers={"Content-Disposition": attachment_header(f"bharatqa-reports-{company_id}.csv")},
    )


@router.get("/{company_id}/tests/{test_id}/report", response_class=PlainTextResponse)
async def test_report(company_id: str, test_id: str, client: BharatQAClient = Depends(get_client)):
    try:
        tests = await client.get_tests(company_id)
        test = next((t for t in tests if str(t.id) == test_id), None)
        if test is None:
            raise HTTPException(status_code=404, detail=f"Test {test_id} not found")
        bugs = await client.get_bugs(test.id)
    except ApiError as err:
        raise_upstream(err, "Failed to export report")
    return PlainTextResponse(
        build_text_report(test, bugs),
        headers={"Content-Disposition": attachment_header(report_filename(test))},
    )
