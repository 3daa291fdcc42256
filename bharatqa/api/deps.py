"""
Shared FastAPI dependencies and upstream error translation.
"""
import logging
from typing import AsyncIterator, NoReturn

from fastapi import Depends, HTTPException

from bharatqa.agents.analysis_monitor import AnalysisMonitor
from bharatqa.client.api_client import BharatQAClient
from bharatqa.core.errors import ApiError
from bharatqa.models.company import Company
from bharatqa.session.store import SessionStore

logger = logging.getLogger(__name__)

session_store = SessionStore()


async def get_client() -> AsyncIterator[BharatQAClient]:
    async with BharatQAClient() as client:
        yield client


def get_session_store() -> SessionStore:
    return session_store


def get_monitor(client: BharatQAClient = Depends(get_client)) -> AnalysisMonitor:
    return AnalysisMonitor(client)


def require_company(store: SessionStore = Depends(get_session_store)) -> Company:
    if store.current is None:
        raise HTTPException(status_code=401, detail="Sign in to continue")
    return store.current


def raise_upstream(err: ApiError, action: str) -> NoReturn:
    """
    Upstream 4xx keep their status (404 stays 404); everything else,
    including an unreachable API, is reported as 502.
    """
    status_code = err.status_code if err.is_client_error else 502
    logger.error("%s failed (upstream %s): %s", action, err.status_code, err.message)
    raise HTTPException(status_code=status_code, detail=f"{action}: {err.message}") from err
