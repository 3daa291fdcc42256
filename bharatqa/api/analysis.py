"""
POST /api/tests/{test_id}/bugs/{bug_id}/analyze
===============================================
Starts the backend AI analysis for one bug and waits (bounded) for it.
With ?wait=false the route returns as soon as the backend accepted the
request, with status "requested"; the caller refreshes the bug list later.

Responses:
    200: AnalysisResponse; status is "completed" or "timeout" (the latter
          tells the caller to refresh later), "requested" when not waiting,
          or "not_found"/"cancelled"/"error"
    404: bug not listed under the test
    409: bug already has an AI analysis (write-once)
"""
import logging
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from bharatqa.agents.analysis_monitor import AnalysisMonitor
from bharatqa.api.deps import get_monitor, raise_upstream
from bharatqa.core.errors import AnalysisAlreadyPresentError, ApiError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["AI Analysis"])

ANALYSIS_STARTED_MESSAGE = "AI analysis started. Refresh in 30-60 seconds."


class AnalysisResponse(BaseModel):
    bug_id: Union[int, str]
    status: str
    attempts: int
    analysis: Optional[str] = None
    message: str = ""
    timeline: List[Dict[str, Any]] = []


@router.post("/tests/{test_id}/bugs/{bug_id}/analyze", response_model=AnalysisResponse)
async def analyze_bug(
    test_id: str,
    bug_id: str,
    wait: bool = True,
    monitor: AnalysisMonitor = Depends(get_monitor),
):
    try:
        bugs = await monitor.client.get_bugs(test_id)
    except ApiError as err:
        raise_upstream(err, "Failed to load bug report")

    bug = next((b for b in bugs if str(b.id) == bug_id), None)
    if bug is None:
        raise HTTPException(status_code=404, detail=f"Bug {bug_id} not found in test {test_id}")

    try:
        if wait:
            result = await monitor.analyze(test_id, bug)
        else:
            await monitor.request_analysis(bug)
            return AnalysisResponse(
                bug_id=bug.id,
                status="requested",
                attempts=0,
                message=ANALYSIS_STARTED_MESSAGE,
                timeline=monitor.get_timeline(),
            )
    except AnalysisAlreadyPresentError as exc:
        logger.warning("[API] %s", exc)
        raise HTTPException(status_code=409, detail=str(exc))
    except ApiError as err:
        raise_upstream(err, "AI analysis failed")

    logger.info("[API] Analysis for bug %s finished: %s after %d attempt(s)", bug_id, result.status, result.attempts)
    return AnalysisResponse(
        bug_id=bug.id,
        status=result.status,
        attempts=result.attempts,
        analysis=result.analysis,
        message=result.message,
        timeline=monitor.get_timeline(),
    )
