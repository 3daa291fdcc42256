"""
Device Stats Model
==================
Canonical, snake_case view of the telemetry a tester's phone uploads with
a bug report. Built only by telemetry.normalizer.normalize_device_stats;
nothing downstream should read the raw blob again.

Fields:
    device_model / manufacturer / android_version / screen_resolution
    network_type / network_speed     : speed is kept verbatim (may carry a unit)
    battery_start / battery_end / battery_drain : percent
    duration_seconds                 : length of the recorded session
    city / state / location_address / latitude / longitude
    location_accuracy / location_source
    crash_detected / crash_info
    device_tier                      : low / mid / high
    ram                              : verbatim, producers disagree on units
    extras                           : every key no alias claimed
"""
from typing import Any, Dict, Optional
from pydantic import BaseModel


class DeviceStats(BaseModel):
    device_model: Optional[str] = None
    manufacturer: Optional[str] = None
    android_version: Optional[str] = None
    screen_resolution: Optional[str] = None
    network_type: Optional[str] = None
    network_speed: Optional[str] = None
    battery_start: Optional[float] = None
    battery_end: Optional[float] = None
    battery_drain: Optional[float] = None
    duration_seconds: Optional[float] = None
    city: Optional[str] = None
    state: Optional[str] = None
    location_address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    location_accuracy: Optional[float] = None
    location_source: Optional[str] = None
    crash_detected: bool = False
    crash_info: Optional[str] = None
    device_tier: Optional[str] = None
    ram: Optional[str] = None
    extras: Dict[str, Any] = {}

    @property
    def has_location(self) -> bool:
        if self.latitude is None or self.longitude is None:
            return False
        return not (self.latitude == 0 and self.longitude == 0)

    @property
    def location_label(self) -> Optional[str]:
        parts = [p for p in (self.city, self.state) if p]
        return ", ".join(parts) or None
