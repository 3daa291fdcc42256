"""
Device Stats Normalizer
=======================
Single ingestion step that maps every known telemetry key variant onto the
canonical DeviceStats schema. Runs once, when a bug report is validated, so
views never have to pick between snake_case and camelCase again.

Adding a producer variant means adding its key to FIELD_ALIASES; the first
alias listed wins when a blob carries several.
"""
import logging
from typing import Any, Optional

from bharatqa.models.device_stats import DeviceStats
from bharatqa.telemetry.formatters import to_number
from bharatqa.telemetry.picker import parse_device_stats, pick_field

logger = logging.getLogger(__name__)


FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "device_model": ("device_model", "deviceModel", "model", "device"),
    "manufacturer": ("manufacturer", "deviceManufacturer", "brand", "device_brand", "deviceBrand"),
    "android_version": ("android_version", "androidVersion", "os_version", "osVersion", "android"),
    "screen_resolution": ("screen_resolution", "screenResolution", "resolution", "screen"),
    "network_type": ("network_type", "networkType", "network", "connection_type", "connectionType"),
    "network_speed": ("network_speed", "networkSpeed", "bandwidth", "download_speed", "downloadSpeed"),
    "battery_start": ("battery_start", "batteryStart", "battery_level_start", "batteryLevelStart"),
    "battery_end": ("battery_end", "batteryEnd", "battery_level_end", "batteryLevelEnd"),
    "battery_drain": ("battery_drain", "batteryDrain"),
    "duration_seconds": (
        "duration_seconds", "durationSeconds", "test_duration", "testDuration",
        "session_duration", "sessionDuration", "duration",
    ),
    "city": ("city", "location_city", "locationCity"),
    "state": ("state", "region", "location_state", "locationState"),
    "location_address": ("location_address", "locationAddress", "full_address", "fullAddress", "address"),
    "latitude": ("latitude", "lat"),
    "longitude": ("longitude", "lng", "lon"),
    "location_accuracy": ("location_accuracy", "locationAccuracy", "accuracy"),
    "location_source": ("location_source", "locationSource"),
    "crash_detected": ("crash_detected", "crashDetected"),
    "crash_info": ("crash_info", "crashInfo"),
    "device_tier": ("device_tier", "deviceTier", "tier"),
    "ram": ("ram", "total_ram", "totalRam", "ram_total", "ramTotal"),
}

_NUMERIC_FIELDS = {
    "battery_start", "battery_end", "battery_drain", "duration_seconds",
    "latitude", "longitude", "location_accuracy",
}

# Placeholders the client writes when it could not resolve a value
_PLACEHOLDERS = {"unknown", "n/a", "null", "undefined"}

_ALL_ALIASES = {alias for aliases in FIELD_ALIASES.values() for alias in aliases}


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() in _PLACEHOLDERS:
        return None
    return text


def _as_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return False


def normalize_device_stats(raw: Any) -> Optional[DeviceStats]:
    """
    Parse and canonicalise a device_stats payload.

    Parameters
    ----------
    raw : Any
        JSON string, mapping, an already-built DeviceStats, or junk.

    Returns
    -------
    DeviceStats or None
        None when the payload cannot be read as an object.
    """
    if isinstance(raw, DeviceStats):
        return raw

    blob = parse_device_stats(raw)
    if blob is None:
        return None

    fields: dict[str, Any] = {}
    for canonical, aliases in FIELD_ALIASES.items():
        value = pick_field(blob, aliases)
        if canonical in _NUMERIC_FIELDS:
            fields[canonical] = to_number(value)
        elif canonical == "crash_detected":
            fields[canonical] = _as_flag(value)
        else:
            fields[canonical] = _as_text(value)

    if fields["device_tier"]:
        fields["device_tier"] = fields["device_tier"].lower()

    if (
        fields["battery_drain"] is None
        and fields["battery_start"] is not None
        and fields["battery_end"] is not None
    ):
        fields["battery_drain"] = round(fields["battery_start"] - fields["battery_end"], 2)

    fields["extras"] = {k: v for k, v in blob.items() if k not in _ALL_ALIASES}

    logger.debug(
        "Normalized device stats: %d canonical fields, %d extras",
        sum(1 for k, v in fields.items() if k != "extras" and v not in (None, False)),
        len(fields["extras"]),
    )
    return DeviceStats(**fields)
