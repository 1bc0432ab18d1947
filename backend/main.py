"""
Learner Performance Dashboard — FastAPI backend entry point.
"""

import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment before route modules read it
load_dotenv()

from core.curriculum import HEADER_ALIASES_VERSION, SUBJECTS  # noqa: E402
from routes.upload import router as upload_router  # noqa: E402
from routes.clean import router as clean_router  # noqa: E402
from routes.analyze import router as analyze_router  # noqa: E402
from routes.reports import router as reports_router  # noqa: E402

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

SCHOOL_NAME = os.getenv("SCHOOL_NAME", "My School")
# Comma-separated allowed origins, e.g. http://localhost:5173,https://app.example.com
raw_origins = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000")
ALLOWED_ORIGINS = [o.strip() for o in raw_origins.split(",") if o.strip()]

app = FastAPI(
    title="Learner Performance API",
    description=(
        "Learner score analytics — spreadsheet ingestion, grading, class "
        "statistics and rule-based insights."
    ),
    version="1.0.0",
)

# CORS — allow the React dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register route modules
app.include_router(upload_router, prefix="/api/upload", tags=["Upload"])
app.include_router(clean_router, prefix="/api/clean", tags=["Cleaning"])
app.include_router(analyze_router, prefix="/api/analyze", tags=["Analytics"])
app.include_router(reports_router, prefix="/api/reports", tags=["Reports"])


@app.get("/api/health")
async def health_check():
    return {
        "status": "ok",
        "school_name": SCHOOL_NAME,
    }


@app.get("/api/config")
async def get_config():
    """Return server configuration to the frontend."""
    return {
        "school_name": SCHOOL_NAME,
        "subjects": [{"key": s.key, "label": s.label, "header": s.header} for s in SUBJECTS],
        "header_aliases_version": HEADER_ALIASES_VERSION,
    }
