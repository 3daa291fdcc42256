"""
Tests & Bugs Endpoints
======================
Company test campaigns and the bug reports filed against them.

Routes:
    GET    /api/company/{company_id}/tests
    GET    /api/company/{company_id}/unique-testers
    POST   /api/tests                    multipart: form fields + optional apk file
    DELETE /api/tests/{test_id}
    GET    /api/tests/{test_id}/stats
    GET    /api/tests/{test_id}/apk-url
    GET    /api/tests/{test_id}/bugs     presented bug detail view models
    DELETE /api/bugs/{bug_id}
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from bharatqa.api.deps import get_client, raise_upstream, require_company
from bharatqa.client.api_client import BharatQAClient
from bharatqa.core.constants import TARGET_DEVICES, TEST_PRIORITIES
from bharatqa.core.errors import ApiError
from bharatqa.models.app_test import AppTest, AppTestStats
from bharatqa.models.company import Company
from bharatqa.services.bug_presenter import present_bug

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Tests"])


@router.get("/company/{company_id}/tests", response_model=List[AppTest])
async def list_tests(company_id: str, client: BharatQAClient = Depends(get_client)):
    try:
        return await client.get_tests(company_id)
    except ApiError as err:
        raise_upstream(err, "Failed to load tests")


@router.get("/company/{company_id}/unique-testers")
async def unique_testers(company_id: str, client: BharatQAClient = Depends(get_client)):
    try:
        return await client.get_company_unique_testers(company_id)
    except ApiError as err:
        raise_upstream(err, "Failed to load testers")


@router.post("/tests")
async def create_test(
    app_name: str = Form(...),
    test_instructions: str = Form(...),
    app_package: str = Form(""),
    priority: str = Form(TEST_PRIORITIES[0]),
    target_devices: str = Form(TARGET_DEVICES[0]),
    apk: Optional[UploadFile] = File(None),
    company: Company = Depends(require_company),
    client: BharatQAClient = Depends(get_client),
):
    if not app_name.strip():
        raise HTTPException(status_code=422, detail="App name is required")
    if not test_instructions.strip():
        raise HTTPException(status_code=422, detail="Test instructions are required")

    priority = priority.strip().lower()
    if priority not in TEST_PRIORITIES:
        raise HTTPException(status_code=422, detail=f"priority must be one of {', '.join(TEST_PRIORITIES)}")
    target_devices = target_devices.strip().lower()
    if target_devices not in TARGET_DEVICES:
        raise HTTPException(
            status_code=422,
            detail=f"target_devices must be one of {', '.join(TARGET_DEVICES)}",
        )

    apk_filename, content = None, None
    if apk is not None and apk.filename:
        content = await apk.read()
        if not content:
            raise HTTPException(status_code=422, detail="APK file is empty")
        apk_filename = apk.filename

    fields = {
        "company_id": company.id,
        "app_name": app_name.strip(),
        "app_package": app_package.strip(),
        "test_instructions": test_instructions.strip(),
        "target_devices": target_devices,
        "priority": priority,
    }
    try:
        created = await client.create_test(fields, apk_filename, content)
    except ApiError as err:
        raise_upstream(err, "Failed to create test")
    logger.info("[API] Test '%s' created for company %s", fields["app_name"], company.id)
    return created


@router.delete("/tests/{test_id}")
async def delete_test(test_id: str, client: BharatQAClient = Depends(get_client)):
    try:
        await client.delete_test(test_id)
    except ApiError as err:
        raise_upstream(err, "Failed to delete test")
    return {"status": "deleted", "test_id": test_id}


@router.get("/tests/{test_id}/stats", response_model=AppTestStats)
async def test_stats(test_id: str, client: BharatQAClient = Depends(get_client)):
    try:
        return await client.get_test_stats(test_id)
    except ApiError as err:
        raise_upstream(err, "Failed to load test stats")


@router.get("/tests/{test_id}/apk-url")
async def apk_url(test_id: str, client: BharatQAClient = Depends(get_client)):
    return {"url": client.apk_download_url(test_id)}


@router.get("/tests/{test_id}/bugs")
async def list_bugs(test_id: str, client: BharatQAClient = Depends(get_client)):
    try:
        bugs = await client.get_bugs(test_id)
    except ApiError as err:
        raise_upstream(err, "Failed to load bug reports")
    return [present_bug(bug) for bug in bugs]


@router.delete("/bugs/{bug_id}")
async def delete_bug(bug_id: str, client: BharatQAClient = Depends(get_client)):
    try:
        await client.delete_bug(bug_id)
    except ApiError as err:
        raise_upstream(err, "Failed to delete bug")
    return {"status": "deleted", "bug_id": bug_id}
