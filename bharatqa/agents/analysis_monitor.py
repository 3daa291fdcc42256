"""
Analysis Monitor
================
Triggers the backend's AI analysis for a bug and polls until it lands.

Polling contract:
    - Fixed interval (ANALYSIS_POLL_INTERVAL), bounded attempts
      (ANALYSIS_POLL_MAX_ATTEMPTS); after the last attempt → "timeout"
    - Each attempt is one GET of the test's bug list
    - Upstream 5xx / transport errors use up an attempt and polling continues
    - Upstream 4xx aborts with "error" (test gone, bad key, ...)
    - stop() ends the loop at the next check → "cancelled"; it stays in
      effect, including for a wait that has not started yet, until reset()
      (task cancellation propagates as usual)
    - A backend answer of {"cached": true} means the analysis already
      exists, so analyze() checks once instead of polling

An AI analysis is write-once: request_analysis refuses bugs that already
carry one.
"""
import time
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from bharatqa.client.api_client import BharatQAClient
from bharatqa.core.config import ANALYSIS_POLL_INTERVAL, ANALYSIS_POLL_MAX_ATTEMPTS
from bharatqa.core.errors import AnalysisAlreadyPresentError, ApiError
from bharatqa.models.bug_report import BugReport

logger = logging.getLogger(__name__)

AnalysisStatus = Literal[
    "requested",
    "pending",
    "completed",
    "timeout",
    "not_found",
    "cancelled",
    "error",
]

TIMEOUT_MESSAGE = "AI analysis is still running. Refresh again in a minute."


@dataclass
class AnalysisPollResult:
    bug_id: Any
    status: AnalysisStatus
    attempts: int
    analysis: Optional[str] = None
    message: str = ""


class AnalysisMonitor:
    """
    Agent that watches one bug report until its AI analysis is available.
    """

    def __init__(
        self,
        client: BharatQAClient,
        interval: float = ANALYSIS_POLL_INTERVAL,
        max_attempts: int = ANALYSIS_POLL_MAX_ATTEMPTS,
    ) -> None:
        self.client = client
        self.interval = interval
        self.max_attempts = max(1, max_attempts)
        self.timeline: List[Dict[str, Any]] = []
        self._active = True

    def stop(self) -> None:
        """Ask wait_for_analysis to give up at its next check."""
        self._active = False

    def reset(self) -> None:
        """Re-arm a stopped monitor."""
        self._active = True

    def _add_timeline_event(self, bug_id: Any, attempt: int, status: AnalysisStatus, elapsed: float) -> None:
        self.timeline.append({
            "bug_id": bug_id,
            "attempt": attempt,
            "status": status,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "elapsed": round(elapsed, 2),
        })

    def _finish(
        self,
        bug_id: Any,
        status: AnalysisStatus,
        attempt: int,
        start_time: float,
        analysis: Optional[str] = None,
        message: str = "",
    ) -> AnalysisPollResult:
        self._add_timeline_event(bug_id, attempt, status, time.time() - start_time)
        return AnalysisPollResult(
            bug_id=bug_id, status=status, attempts=attempt, analysis=analysis, message=message
        )

    async def request_analysis(self, bug: BugReport) -> Any:
        """Start the backend analysis for a bug that has none yet."""
        if bug.has_analysis:
            raise AnalysisAlreadyPresentError(bug.id)
        logger.info("Requesting AI analysis for bug %s", bug.id)
        result = await self.client.analyze_with_ai(bug.id)
        self._add_timeline_event(bug.id, 0, "requested", 0.0)
        return result

    async def wait_for_analysis(
        self, test_id: Any, bug_id: Any, max_attempts: Optional[int] = None
    ) -> AnalysisPollResult:
        """Poll the test's bug list until bug_id carries an analysis."""
        max_attempts = max(1, max_attempts or self.max_attempts)
        start_time = time.time()
        last_status = ""

        for attempt in range(1, max_attempts + 1):
            if not self._active:
                logger.info("Analysis polling for bug %s stopped", bug_id)
                return self._finish(bug_id, "cancelled", attempt - 1, start_time)

            try:
                bugs = await self.client.get_bugs(test_id)
            except ApiError as err:
                if err.is_client_error:
                    logger.error("Analysis polling aborted: HTTP %d: %s", err.status_code, err.message)
                    return self._finish(bug_id, "error", attempt, start_time, message=err.message)
                logger.error("Analysis polling attempt %d failed, retrying: %s", attempt, err.message)
            else:
                bug = next((b for b in bugs if str(b.id) == str(bug_id)), None)
                if bug is None:
                    logger.warning("Bug %s no longer listed under test %s", bug_id, test_id)
                    return self._finish(
                        bug_id, "not_found", attempt, start_time, message="Bug report not found"
                    )
                if bug.has_analysis:
                    logger.info("AI analysis ready for bug %s after %d attempt(s)", bug_id, attempt)
                    return self._finish(bug_id, "completed", attempt, start_time, analysis=bug.analysis_text)

                if last_status != "pending":
                    self._add_timeline_event(bug_id, attempt, "pending", time.time() - start_time)
                    last_status = "pending"

            if attempt < max_attempts:
                await asyncio.sleep(self.interval)

        logger.warning("AI analysis for bug %s not ready after %d attempts", bug_id, max_attempts)
        return self._finish(bug_id, "timeout", max_attempts, start_time, message=TIMEOUT_MESSAGE)

    async def analyze(self, test_id: Any, bug: BugReport) -> AnalysisPollResult:
        """Request analysis for a bug, then wait for it."""
        response = await self.request_analysis(bug)
        if isinstance(response, dict) and response.get("cached"):
            logger.info("Backend already holds an analysis for bug %s", bug.id)
            return await self.wait_for_analysis(test_id, bug.id, max_attempts=1)
        return await self.wait_for_analysis(test_id, bug.id)

    def get_timeline(self) -> List[Dict[str, Any]]:
        return self.timeline
