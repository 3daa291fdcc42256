"""
Bug Report Model
================
Pydantic model for a tester's bug report as returned by the BharatQA API.
This is the ingestion boundary: key variants are resolved and device_stats
is normalized here, so every consumer reads one schema.

Fields:
    id / test_id       : backend identifiers (int or str depending on store)
    title              : from bug_title or title
    description        : from bug_description or description; may embed
                          tester feedback AND auto-appended telemetry
    severity           : critical / high / medium / low (lowercased)
    tester_name        : display name of the tester
    device_info        : one-line device summary written by the client
    test_duration      : seconds the recorded session lasted
    recording_url      : absolute URL, /path, or bare upload file name
    screenshot_url     : absolute URL
    screenshots        : upload file names; older clients send one
                          comma-separated string
    device_stats       : DeviceStats or None when missing/unreadable
    ai_analysis        : text or object; write-once (see has_analysis)
    tester_notes       : explicit notes field sent by newer clients
    app_name           : attached when bugs are aggregated across tests
"""
import json
from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from bharatqa.models.device_stats import DeviceStats
from bharatqa.telemetry.formatters import to_number
from bharatqa.telemetry.normalizer import normalize_device_stats
from bharatqa.telemetry.notes import extract_tester_notes
from bharatqa.telemetry.picker import pick_field


class BugReport(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Union[int, str]
    test_id: Optional[Union[int, str]] = None
    title: Optional[str] = None
    description: Optional[str] = None
    severity: Optional[str] = None
    tester_name: Optional[str] = None
    device_info: Optional[str] = None
    test_duration: Optional[float] = None
    steps_to_reproduce: Optional[str] = None
    created_at: Optional[datetime] = None
    recording_url: Optional[str] = None
    screenshot_url: Optional[str] = None
    screenshots: List[str] = []
    device_stats: Optional[DeviceStats] = None
    ai_analysis: Optional[Union[str, dict, list]] = None
    tester_notes: Optional[str] = None
    app_name: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def resolve_aliases(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        data["title"] = pick_field(data, ("bug_title", "title"))
        data["description"] = pick_field(data, ("bug_description", "description"))
        data["test_id"] = pick_field(data, ("test_id", "testId"))
        data["tester_name"] = pick_field(data, ("tester_name", "testerName"))
        data["tester_notes"] = pick_field(data, ("tester_notes", "testerNotes"))
        data["device_stats"] = pick_field(data, ("device_stats", "deviceStats"))
        return data

    @field_validator("severity", mode="before")
    @classmethod
    def lower_severity(cls, v: Any) -> Optional[str]:
        if v is None or not str(v).strip():
            return None
        return str(v).strip().lower()

    @field_validator("test_duration", mode="before")
    @classmethod
    def coerce_duration(cls, v: Any) -> Optional[float]:
        return to_number(v)

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_created_at(cls, v: Any) -> Any:
        if isinstance(v, str):
            text = v.strip()
            if not text:
                return None
            try:
                return datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError:
                return None
        return v

    @field_validator("screenshots", mode="before")
    @classmethod
    def split_screenshots(cls, v: Any) -> List[str]:
        if not v:
            return []
        if isinstance(v, str):
            v = v.split(",")
        if not isinstance(v, (list, tuple)):
            return []
        return [str(s).strip() for s in v if s is not None and str(s).strip()]

    @field_validator("device_stats", mode="before")
    @classmethod
    def normalize_stats(cls, v: Any) -> Optional[DeviceStats]:
        return normalize_device_stats(v)

    @field_validator("ai_analysis", mode="before")
    @classmethod
    def blank_analysis_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def has_analysis(self) -> bool:
        return self.ai_analysis is not None

    @property
    def analysis_text(self) -> Optional[str]:
        """AI analysis as display text; objects are pretty-printed JSON."""
        if self.ai_analysis is None:
            return None
        if isinstance(self.ai_analysis, str):
            return self.ai_analysis
        return json.dumps(self.ai_analysis, indent=2, ensure_ascii=False)

    @property
    def notes(self) -> Optional[str]:
        """Explicit tester_notes when sent, otherwise inferred from the description."""
        if self.tester_notes and self.tester_notes.strip():
            return self.tester_notes.strip()
        return extract_tester_notes(self.description)
