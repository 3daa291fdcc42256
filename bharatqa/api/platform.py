"""
Platform Endpoints
==================
GET /api/admin/stats                platform-wide counters
GET /api/admin/recent-bugs?limit=N  newest bug reports across all companies
GET /api/earnings/{tester_name}     a tester's payouts (paid and pending)
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from bharatqa.api.deps import get_client, raise_upstream
from bharatqa.client.api_client import BharatQAClient
from bharatqa.core.errors import ApiError
from bharatqa.models.admin_stats import AdminStats
from bharatqa.models.earnings import TesterEarnings
from bharatqa.services.bug_presenter import present_bug
from bharatqa.services.report_exporter import sort_newest_first

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.get("/admin/stats", response_model=AdminStats, tags=["Admin"])
async def admin_stats(client: BharatQAClient = Depends(get_client)):
    try:
        return await client.get_admin_stats()
    except ApiError as err:
        raise_upstream(err, "Failed to load platform stats")


@router.get("/admin/recent-bugs", tags=["Admin"])
async def recent_bugs(
    limit: int = Query(10, ge=1, le=100),
    client: BharatQAClient = Depends(get_client),
):
    try:
        bugs = await client.get_all_bugs()
    except ApiError as err:
        raise_upstream(err, "Failed to load bug reports")
    return [present_bug(bug) for bug in sort_newest_first(bugs)[:limit]]


@router.get("/earnings/{tester_name}", response_model=TesterEarnings, tags=["Testers"])
async def tester_earnings(tester_name: str, client: BharatQAClient = Depends(get_client)):
    if not tester_name.strip():
        raise HTTPException(status_code=422, detail="Tester name is required")
    try:
        earnings = await client.get_earnings(tester_name)
    except ApiError as err:
        raise_upstream(err, "Failed to load earnings")
    logger.info("[API] Earnings for %s: %d entries", earnings.tester_name, len(earnings.earnings))
    return earnings
