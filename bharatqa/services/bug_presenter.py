"""
Bug Presenter
=============
Builds the bug-detail view model the dashboard renders.

Fallbacks:
    title        → "Untitled Bug"
    tester       → "Anonymous"
    description  → "No description provided."
    severity     → colour of "low" when missing/unknown

Recording and screenshot URLs come in three shapes depending on backend version:
    https://...        kept as is
    /uploads/x.mp4     joined to the backend origin
    x.mp4              joined under <backend>/uploads/
"""
from typing import Any, Dict, List, Optional

from bharatqa.core.config import BHARATQA_BACKEND_URL
from bharatqa.core.constants import SEVERITY_COLORS
from bharatqa.models.bug_report import BugReport
from bharatqa.models.device_stats import DeviceStats
from bharatqa.telemetry.formatters import (
    format_accuracy,
    format_bandwidth,
    format_battery_range,
    format_coordinates,
    format_duration,
    format_percent,
    maps_link,
)


def severity_color(severity: Optional[str]) -> str:
    return SEVERITY_COLORS.get((severity or "").lower(), SEVERITY_COLORS["low"])


def resolve_media_url(url: Optional[str], backend_url: str = BHARATQA_BACKEND_URL) -> Optional[str]:
    if not url or not url.strip():
        return None
    url = url.strip()
    if url.startswith("http://") or url.startswith("https://"):
        return url
    base = backend_url.rstrip("/")
    if url.startswith("/"):
        return base + url
    return f"{base}/uploads/{url}"


def device_rows(stats: Optional[DeviceStats]) -> List[Dict[str, str]]:
    """Label/value pairs for the device info grid; empty values are skipped."""
    if stats is None:
        return []

    network = None
    if stats.network_type:
        speed = format_bandwidth(stats.network_speed)
        network = f"{stats.network_type} ({speed})" if speed else stats.network_type

    battery = format_battery_range(stats.battery_start, stats.battery_end)
    drain = format_percent(stats.battery_drain)
    if battery and drain:
        battery = f"{battery} ({drain} drain)"

    location = stats.location_label
    accuracy = format_accuracy(stats.location_accuracy)
    if location and accuracy:
        source = f", {stats.location_source}" if stats.location_source else ""
        location = f"{location} ({accuracy} accuracy{source})"

    candidates = [
        ("Device", stats.device_model),
        ("Manufacturer", stats.manufacturer),
        ("Android", stats.android_version),
        ("Screen", stats.screen_resolution),
        ("Network", network),
        ("Battery", battery),
        ("Duration", format_duration(stats.duration_seconds)),
        ("Location", location),
        ("Address", stats.location_address),
        ("Coordinates", format_coordinates(stats.latitude, stats.longitude)),
        ("Device tier", stats.device_tier),
        ("RAM", stats.ram),
    ]
    if stats.crash_detected:
        candidates.append(("Crash", stats.crash_info or "Crash detected"))

    return [{"label": label, "value": value} for label, value in candidates if value]


def present_bug(bug: BugReport, backend_url: str = BHARATQA_BACKEND_URL) -> Dict[str, Any]:
    stats = bug.device_stats
    return {
        "id": bug.id,
        "test_id": bug.test_id,
        "app_name": bug.app_name,
        "title": bug.title or "Untitled Bug",
        "description": bug.description or "No description provided.",
        "tester_notes": bug.notes,
        "steps_to_reproduce": bug.steps_to_reproduce,
        "tester_name": bug.tester_name or "Anonymous",
        "severity": bug.severity,
        "severity_color": severity_color(bug.severity),
        "created_at": bug.created_at.isoformat() if bug.created_at else None,
        "duration": format_duration(bug.test_duration),
        "device_info": bug.device_info,
        "recording_url": resolve_media_url(bug.recording_url, backend_url),
        "screenshot_url": resolve_media_url(bug.screenshot_url, backend_url),
        "screenshots": [resolve_media_url(name, backend_url) for name in bug.screenshots],
        "device": device_rows(stats),
        "maps_url": maps_link(stats.latitude, stats.longitude) if stats else None,
        "ai_analysis": bug.analysis_text,
        "status": "Analyzed" if bug.has_analysis else "New",
    }
