"""
Tester Notes Extractor
======================
The Android client appends auto-generated telemetry to the free-text bug
description. This module decides whether a description carries genuine
human feedback worth showing as "tester notes".

Pipeline:
    1. "tester feedback" marker present  → text after it, minus rating and
       separator runs (None if nothing is left)
    2. >= TELEMETRY_ONLY_THRESHOLD distinct telemetry labels → None
    3. anything else                     → the raw text, unchanged

Heuristic only: false positives/negatives are accepted. Callers that have
an explicit tester_notes field should prefer it (see BugReport.notes).
"""
import re
from typing import Optional

from bharatqa.core.constants import TELEMETRY_LABELS, TELEMETRY_ONLY_THRESHOLD

_FEEDBACK_MARKER = re.compile(r"tester\s+feedback\s*:?", re.IGNORECASE)
_RATING = re.compile(r"rating\s*:\s*\d+(?:\.\d+)?\s*/\s*\d+", re.IGNORECASE)
_SEPARATOR_RUN = re.compile(r"[-=_*─═]{3,}")


def count_telemetry_labels(text: str) -> int:
    """Number of distinct telemetry labels that appear in the text."""
    return sum(1 for label in TELEMETRY_LABELS if label in text)


def is_telemetry_only(text: str) -> bool:
    return count_telemetry_labels(text) >= TELEMETRY_ONLY_THRESHOLD


def extract_tester_notes(description: Optional[str]) -> Optional[str]:
    """
    Return the human-written part of a bug description, or None.

    Parameters
    ----------
    description : str or None
        Raw bug description as stored by the backend.

    Returns
    -------
    str or None
        Feedback text, the untouched description, or None when the
        description is empty or looks like telemetry only.
    """
    if not isinstance(description, str) or not description.strip():
        return None

    marker = _FEEDBACK_MARKER.search(description)
    if marker:
        remainder = description[marker.end():]
        remainder = _RATING.sub("", remainder)
        remainder = _SEPARATOR_RUN.sub("", remainder)
        remainder = remainder.strip()
        return remainder or None

    if is_telemetry_only(description):
        return None

    return description
