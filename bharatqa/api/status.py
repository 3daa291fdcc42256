"""
GET /api/upstream-health
Reports whether the BharatQA API answers; never fails, the home view shows the result.
"""
import logging

from fastapi import APIRouter, Depends

from bharatqa.api.deps import get_client
from bharatqa.client.api_client import BharatQAClient
from bharatqa.core.errors import ApiError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.get("/upstream-health")
async def upstream_health(client: BharatQAClient = Depends(get_client)):
    try:
        data = await client.get_health()
    except ApiError as err:
        logger.warning("BharatQA API health check failed: %s", err.message)
        return {"connected": False, "detail": err.message}
    return {"connected": True, "upstream": data}
