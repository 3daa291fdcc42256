"""
Report Exporter
===============
Company-wide report aggregation plus the plain-text and CSV exports.

- collect_company_reports: every bug across a company's tests, tagged with
  the app name and sorted newest first
- summarize_reports: counters shown on the global reports page
- build_text_report: downloadable per-test report
- build_csv_report: export of the aggregated reports table
"""
import csv
import io
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from bharatqa.client.api_client import BharatQAClient
from bharatqa.core.config import BHARATQA_BACKEND_URL
from bharatqa.core.constants import ARROW
from bharatqa.models.app_test import AppTest
from bharatqa.models.bug_report import BugReport
from bharatqa.services.bug_presenter import resolve_media_url
from bharatqa.telemetry.formatters import format_bandwidth, format_percent

logger = logging.getLogger(__name__)

_RULE = "═" * 35
_DIVIDER = "─" * 40
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class ReportsSummary:
    total_bugs: int
    critical_bugs: int
    analyzed_bugs: int


def _sort_key(bug: BugReport) -> datetime:
    if bug.created_at is None:
        return _OLDEST
    if bug.created_at.tzinfo is None:
        return bug.created_at.replace(tzinfo=timezone.utc)
    return bug.created_at


def sort_newest_first(bugs: Sequence[BugReport]) -> List[BugReport]:
    return sorted(bugs, key=_sort_key, reverse=True)


async def collect_company_reports(client: BharatQAClient, company_id) -> tuple[List[AppTest], List[BugReport]]:
    tests = await client.get_tests(company_id)
    reports: List[BugReport] = []
    for test in tests:
        bugs = await client.get_bugs(test.id)
        reports.extend(bug.model_copy(update={"app_name": test.app_name}) for bug in bugs)
    logger.info("Collected %d reports across %d tests for company %s", len(reports), len(tests), company_id)
    return tests, sort_newest_first(reports)


def summarize_reports(tests: Sequence[AppTest], reports: Sequence[BugReport]) -> ReportsSummary:
    return ReportsSummary(
        total_bugs=len(reports),
        critical_bugs=sum(t.critical_count for t in tests),
        analyzed_bugs=sum(1 for r in reports if r.has_analysis),
    )


def _format_timestamp(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "N/A"


def _stats_block(bug: BugReport) -> List[str]:
    stats = bug.device_stats
    if stats is None:
        return []
    battery_start = format_percent(stats.battery_start) or "?"
    battery_end = format_percent(stats.battery_end) or "?"
    drain = format_percent(stats.battery_drain) or "?"
    location = ", ".join(p or "?" for p in (stats.city, stats.state))
    lines = [
        "",
        "Device Stats:",
        f"  Battery: {battery_start} {ARROW} {battery_end} ({drain} drain)",
        f"  Network: {stats.network_type or '?'} ({format_bandwidth(stats.network_speed) or '?'})",
        f"  Device: {stats.device_model or '?'}",
        f"  Android: {stats.android_version or '?'}",
        f"  Location: {location}",
        f"  Address: {stats.location_address or '?'}",
        f"  Coordinates: {stats.latitude if stats.latitude is not None else '?'}, "
        f"{stats.longitude if stats.longitude is not None else '?'}",
    ]
    if stats.crash_detected:
        lines.append(f"  CRASH: {stats.crash_info or 'details unavailable'}")
    return lines


def build_text_report(
    test: AppTest,
    bugs: Sequence[BugReport],
    generated_at: Optional[datetime] = None,
    backend_url: str = BHARATQA_BACKEND_URL,
) -> str:
    generated_at = generated_at or datetime.now(timezone.utc)
    lines = [
        _RULE,
        "  BharatQA Test Report",
        _RULE,
        f"App: {test.app_name}",
        f"Company: {test.company_name or 'N/A'}",
        f"Date: {_format_timestamp(generated_at)}",
        f"Total Reports: {len(bugs)}",
        _RULE,
        "",
    ]
    for i, bug in enumerate(bugs, start=1):
        duration = int(bug.test_duration) if bug.test_duration is not None else 0
        lines += [
            f"--- Report #{i} ---",
            f"Title: {bug.title or 'Untitled Bug'}",
            f"Severity: {(bug.severity or 'N/A').upper()}",
            f"Tester: {bug.tester_name or 'Anonymous'}",
            f"Device: {bug.device_info or 'N/A'}",
            f"Duration: {duration}s",
            f"Date: {_format_timestamp(bug.created_at)}",
            "",
            "Description:",
            bug.description or "N/A",
        ]
        lines += _stats_block(bug)
        video = resolve_media_url(bug.recording_url, backend_url)
        if video:
            lines += ["", f"Video: {video}"]
        lines += ["", _DIVIDER, ""]
    return "\n".join(lines)


def report_filename(test: AppTest) -> str:
    return "_".join(test.app_name.split()) + "-report.txt"


CSV_COLUMNS = ["Issue Title", "Project", "Reporter", "Date", "Severity", "Status"]


def build_csv_report(reports: Sequence[BugReport]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_COLUMNS)
    for report in reports:
        writer.writerow([
            report.title or "Untitled Issue",
            report.app_name or "",
            report.tester_name or "Anonymous",
            report.created_at.date().isoformat() if report.created_at else "",
            report.severity or "",
            "Analyzed" if report.has_analysis else "New",
        ])
    return buffer.getvalue()
