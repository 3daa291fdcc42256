"""
Company Model
Pydantic model for the company identity held in the dashboard session.
"""
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class Company(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Union[int, str]
    name: Optional[str] = None
    email: Optional[str] = None
    picture: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None
    role: Optional[str] = None
    onboarded: bool = False

    @model_validator(mode="before")
    @classmethod
    def resolve_name(cls, data):
        # Google sign-in returns "name"; older records use "company_name"
        if isinstance(data, dict) and not data.get("name") and data.get("company_name"):
            data = {**data, "name": data["company_name"]}
        return data

    @field_validator("onboarded", mode="before")
    @classmethod
    def none_is_false(cls, v):
        return bool(v)


class OnboardingDetails(BaseModel):
    name: str
    industry: str
    company_size: str
    role: str
    website: Optional[str] = None
