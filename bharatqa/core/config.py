"""
Configuration
=============
Loads environment variables from .env file using python-dotenv.

Environment Variables:
    BHARATQA_API_URL           : Base URL of the BharatQA REST API (ends in /api)
    BHARATQA_API_KEY           : Sent as x-api-key on every non-public endpoint
    BHARATQA_BACKEND_URL       : Origin serving uploads (default: API URL minus /api)
    GOOGLE_CLIENT_ID           : OAuth client used by the company sign-in flow
    REQUEST_TIMEOUT            : Per-request timeout in seconds (default: 30)
    ANALYSIS_POLL_INTERVAL     : Seconds between AI-analysis status checks (default: 5)
    ANALYSIS_POLL_MAX_ATTEMPTS : Status checks before giving up (default: 24)
    SESSION_FILE               : Where the company session is persisted
    CORS_ORIGINS               : Comma-separated origins allowed to call this service
    LOG_LEVEL                  : Root log level (default: INFO)
    LOG_DIR                    : Directory for the daily log file; empty disables it (default: logs)

Polling Budget:
    The AI analysis runs on the backend and usually lands in 30-60 seconds.
    INTERVAL x MAX_ATTEMPTS is the longest a caller waits before the
    monitor reports a timeout and asks for a manual refresh.
"""
import os
import re
from dotenv import load_dotenv

load_dotenv()

BHARATQA_API_URL = os.getenv(
    "BHARATQA_API_URL", "https://bharatqabackend.onrender.com/api"
).rstrip("/")
BHARATQA_API_KEY = os.getenv("BHARATQA_API_KEY", "")
BHARATQA_BACKEND_URL = os.getenv(
    "BHARATQA_BACKEND_URL", re.sub(r"/api/?$", "", BHARATQA_API_URL)
).rstrip("/")
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID", "")

REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", 30))

# AI analysis polling
ANALYSIS_POLL_INTERVAL = float(os.getenv("ANALYSIS_POLL_INTERVAL", 5))
ANALYSIS_POLL_MAX_ATTEMPTS = int(os.getenv("ANALYSIS_POLL_MAX_ATTEMPTS", 24))

# Company session persistence
SESSION_FILE = os.getenv("SESSION_FILE", ".bharatqa_session.json")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = os.getenv("LOG_DIR", "logs")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
    ).split(",")
    if origin.strip()
]
