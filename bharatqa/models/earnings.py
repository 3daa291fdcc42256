"""
Tester Earnings Models
Pydantic models for the per-tester payout lookup.
"""
from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from bharatqa.telemetry.formatters import to_number


class EarningEntry(BaseModel):
    model_config = ConfigDict(extra="allow")

    test_id: Optional[Union[int, str]] = None
    app_name: Optional[str] = None
    company_name: Optional[str] = None
    amount: float = 0.0
    status: str = "pending"
    created_at: Optional[datetime] = None

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v):
        return to_number(v) or 0.0

    @field_validator("status", mode="before")
    @classmethod
    def lower_status(cls, v):
        return str(v).strip().lower() if v else "pending"

    @field_validator("created_at", mode="before")
    @classmethod
    def tolerant_date(cls, v):
        if isinstance(v, str):
            try:
                return datetime.fromisoformat(v.strip().replace("Z", "+00:00"))
            except ValueError:
                return None
        return v

    @property
    def is_paid(self) -> bool:
        return self.status == "paid"

    @property
    def label(self) -> str:
        return self.app_name or f"Test #{self.test_id}"


class TesterEarnings(BaseModel):
    model_config = ConfigDict(extra="allow")

    tester_name: Optional[str] = None
    total_earned: float = 0.0
    pending_amount: float = 0.0
    tests_completed: int = 0
    earnings: List[EarningEntry] = []

    @field_validator("total_earned", "pending_amount", mode="before")
    @classmethod
    def coerce_amounts(cls, v):
        return to_number(v) or 0.0

    @field_validator("tests_completed", mode="before")
    @classmethod
    def none_is_zero(cls, v):
        return int(to_number(v) or 0)

    @field_validator("earnings", mode="before")
    @classmethod
    def none_is_empty(cls, v):
        return v if isinstance(v, list) else []
