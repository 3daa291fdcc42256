import uvicorn
import time
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from bharatqa.api.analysis import router as analysis_router
from bharatqa.api.deps import session_store
from bharatqa.api.platform import router as platform_router
from bharatqa.api.reports import router as reports_router
from bharatqa.api.session import router as session_router
from bharatqa.api.status import router as status_router
from bharatqa.api.tests import router as tests_router
from bharatqa.core.config import CORS_ORIGINS, LOG_DIR, LOG_LEVEL
from bharatqa.utils.logging_config import setup_logging

setup_logging(level=getattr(logging, LOG_LEVEL, logging.INFO), log_dir=LOG_DIR)
logger = logging.getLogger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    company = session_store.load()
    if company:
        logger.info("Restored session for company %s", company.id)
    yield


app = FastAPI(title="BharatQA Company Dashboard API", lifespan=lifespan)


# ---------------------------------------------------------------------------
# Logging Middleware
# ---------------------------------------------------------------------------
class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        client_host = request.client.host if request.client else "unknown"
        logger.info(f"Incoming: {request.method} {request.url.path} from {client_host}")

        try:
            response = await call_next(request)
            process_time = (time.time() - start_time) * 1000
            logger.info(
                f"Outgoing: {request.method} {request.url.path} - "
                f"Status: {response.status_code} - "
                f"Time: {process_time:.2f}ms"
            )
            return response
        except Exception as e:
            logger.error(f"Request failed: {request.method} {request.url.path} - Error: {str(e)}")
            raise


app.add_middleware(LoggingMiddleware)

# ---------------------------------------------------------------------------
# CORS: the React dashboard calls this service from another origin
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    return {"status": "ok"}


app.include_router(session_router)
app.include_router(tests_router)
app.include_router(analysis_router)
app.include_router(reports_router)
app.include_router(platform_router)
app.include_router(status_router, tags=["Health"])

if __name__ == "__main__":
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)
