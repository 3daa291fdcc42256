"""
Admin Stats Model
Platform-wide counters shown on the admin overview.
"""
from pydantic import BaseModel, ConfigDict, field_validator

from bharatqa.telemetry.formatters import to_number


class AdminStats(BaseModel):
    model_config = ConfigDict(extra="allow")

    total_tests: int = 0
    total_bugs: int = 0
    total_testers: int = 0
    critical_bugs: int = 0
    total_earnings: float = 0.0

    @field_validator("total_tests", "total_bugs", "total_testers", "critical_bugs", mode="before")
    @classmethod
    def count_or_zero(cls, v):
        return int(to_number(v) or 0)

    @field_validator("total_earnings", mode="before")
    @classmethod
    def amount_or_zero(cls, v):
        return to_number(v) or 0.0
