"""
Telemetry Field Picker
======================
Different versions of the Android client and the backend wrote the same
semantic field under different names (device_model / deviceModel / model).
These helpers read a loosely-shaped telemetry blob without ever raising.

Contract:
    - pick_field returns the first present, non-null, non-empty value
      following the ORDER OF THE KEYS GIVEN, not the order of the object.
    - 0, 0.0 and False are present values; None and blank strings are not.
    - Any lookup failure yields None.
"""
import json
import logging
from collections.abc import Mapping
from typing import Any, Iterable, Optional

logger = logging.getLogger(__name__)


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def pick_field(obj: Any, keys: Iterable[str]) -> Optional[Any]:
    """
    Return the value of the first candidate key that holds something.

    Parameters
    ----------
    obj : Any
        Parsed telemetry object. Anything that is not a mapping yields None.
    keys : Iterable[str]
        Candidate key names, most preferred first.

    Returns
    -------
    Any or None
    """
    if not isinstance(obj, Mapping) or keys is None:
        return None
    if isinstance(keys, str):
        keys = (keys,)
    try:
        for key in keys:
            value = obj.get(key)
            if not _is_empty(value):
                return value
    except (TypeError, AttributeError) as exc:
        logger.debug("Field lookup failed for keys %r: %s", keys, exc)
        return None
    return None


def parse_device_stats(raw: Any) -> Optional[dict]:
    """
    Turn a device_stats payload into a dict.

    The backend stores device_stats as a JSON-encoded string in some
    versions and as an object in others. Invalid JSON, JSON that is not an
    object, and any other type all degrade to None ("no stats available").
    """
    if raw is None:
        return None
    if isinstance(raw, Mapping):
        return dict(raw)
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("device_stats bytes are not valid UTF-8")
            return None
    if isinstance(raw, str):
        if not raw.strip():
            return None
        try:
            parsed = json.loads(raw)
        except ValueError as exc:
            logger.debug("device_stats is not valid JSON: %s", exc)
            return None
        if isinstance(parsed, dict):
            return parsed
        logger.debug("device_stats JSON is a %s, not an object", type(parsed).__name__)
        return None
    return None
