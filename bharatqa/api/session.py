"""
/api/session
============
Company sign-in, onboarding, settings and sign-out.

Every change to the signed-in company goes through SessionStore.write:
sign-in replaces the session, onboarding and settings merge into it.
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from bharatqa.api.deps import get_client, get_session_store, raise_upstream, require_company
from bharatqa.client.api_client import BharatQAClient
from bharatqa.core.constants import (
    COMPANY_SIZES,
    DEVICE_TIERS,
    INDUSTRIES,
    ROLES,
    TARGET_DEVICES,
    TEST_PRIORITIES,
)
from bharatqa.core.errors import ApiError
from bharatqa.models.company import Company, OnboardingDetails
from bharatqa.session.store import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/session", tags=["Session"])


class LoginRequest(BaseModel):
    credential: str


@router.post("/login", response_model=Company)
async def login(
    request: LoginRequest,
    client: BharatQAClient = Depends(get_client),
    store: SessionStore = Depends(get_session_store),
):
    try:
        company = await client.google_auth(request.credential)
    except ApiError as err:
        raise_upstream(err, "Sign-in failed")
    logger.info("[API] Company %s signed in", company.id)
    return store.write(company, mode="replace")


@router.get("", response_model=Company)
async def current_session(company: Company = Depends(require_company)):
    return company


@router.delete("")
async def logout(store: SessionStore = Depends(get_session_store)):
    store.clear()
    return {"status": "signed_out"}


@router.get("/options")
async def onboarding_options():
    return {
        "industries": INDUSTRIES,
        "company_sizes": COMPANY_SIZES,
        "roles": ROLES,
        "device_tiers": list(DEVICE_TIERS),
        "test_priorities": list(TEST_PRIORITIES),
        "target_devices": list(TARGET_DEVICES),
    }


@router.put("/onboarding", response_model=Company)
async def onboard(
    details: OnboardingDetails,
    company: Company = Depends(require_company),
    client: BharatQAClient = Depends(get_client),
    store: SessionStore = Depends(get_session_store),
):
    try:
        updated = await client.onboard_company(company.id, details.model_dump(exclude_none=True))
    except ApiError as err:
        raise_upstream(err, "Onboarding failed")
    return store.write(updated.model_copy(update={"onboarded": True}), mode="merge")


@router.put("/company", response_model=Company)
async def update_company(
    changes: Dict[str, Any],
    company: Company = Depends(require_company),
    client: BharatQAClient = Depends(get_client),
    store: SessionStore = Depends(get_session_store),
):
    if "id" in changes and str(changes["id"]) != str(company.id):
        raise HTTPException(status_code=400, detail="Company id cannot be changed")
    try:
        updated = await client.update_company(company.id, changes)
    except ApiError as err:
        raise_upstream(err, "Failed to update company")
    return store.write(updated, mode="merge")


@router.delete("/company")
async def delete_company(
    company: Company = Depends(require_company),
    client: BharatQAClient = Depends(get_client),
    store: SessionStore = Depends(get_session_store),
):
    try:
        await client.delete_company(company.id)
    except ApiError as err:
        raise_upstream(err, "Failed to delete company")
    store.clear()
    logger.info("[API] Company %s deleted its account", company.id)
    return {"status": "deleted"}
