"""
FastAPI Endpoints for the Pitch Review Pipeline
===============================================
JSON request/response API over the review engine.

Base URL: http://localhost:8000

Endpoints:
- GET  /                      - API info
- GET  /api/health            - Health check
- POST /api/pitches/review    - Fast gate review
- POST /api/pitches/analyze   - Deep analysis (authenticated)
- POST /api/pitches/notify    - Send a status notification to the founder
- GET  /api/stats             - Engine statistics
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

# Load environment variables
load_dotenv()

from ..engine import PitchReviewEngine
from ..errors import (
    InvalidNotificationError,
    MissingPitchIdError,
    PitchNotFoundError,
    PitchReviewError,
)
from ..models.schemas import (
    AnalysisBody,
    AnalysisResponse,
    GateResponse,
    NotifyRequest,
    PitchIdRequest,
    ReviewStatus,
    User,
)
from ..services.llm_client import LLMClient
from ..services.store import InMemoryPitchStore, UserDirectory, service_role_credential

log = logging.getLogger(__name__)


# =============================================================================
# FastAPI App Initialization
# =============================================================================

app = FastAPI(
    title="Pitch Review API",
    description="""
## Startup Pitch Review

Decides whether submitted pitches are fit to publish.

### Features:
- **Fast Gate**: deterministic checks plus an advisory LLM pass
- **Deep Analysis**: LLM sub-scores and founder feedback
- **Notifications**: best-effort founder messages after each decision
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Storage & Engine Initialization
# =============================================================================

# In-memory storage (replace with the application's database in production)
pitch_store = InMemoryPitchStore(credential=service_role_credential())
user_directory = UserDirectory()
default_engine = PitchReviewEngine(store=pitch_store, llm=LLMClient())

bearer_scheme = HTTPBearer(auto_error=False)


def get_engine() -> PitchReviewEngine:
    return default_engine


def get_user_directory() -> UserDirectory:
    return user_directory


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    directory: UserDirectory = Depends(get_user_directory),
) -> Optional[User]:
    """Resolve the bearer token; None when the caller is anonymous"""
    if credentials is None:
        return None
    return directory.resolve(credentials.credentials)


# =============================================================================
# Health & Info Endpoints
# =============================================================================

@app.get("/", tags=["Info"])
async def root():
    """API information and available endpoints"""
    return {
        "service": "Pitch Review API",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
        "endpoints": {
            "Fast Gate": "POST /api/pitches/review",
            "Deep Analysis": "POST /api/pitches/analyze",
            "Notify": "POST /api/pitches/notify",
            "Health": "GET /api/health",
        },
    }


@app.get("/api/health", tags=["Info"])
async def health_check(engine: PitchReviewEngine = Depends(get_engine)):
    """Health check endpoint for monitoring"""
    return {
        "status": "healthy",
        "service": "Pitch Review API",
        "version": "1.0.0",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "llm_configured": engine.llm.configured,
    }


# =============================================================================
# Review Endpoints
# =============================================================================

@app.post("/api/pitches/review", response_model=GateResponse, tags=["Review"])
def review_pitch(
    request: Optional[PitchIdRequest] = None,
    engine: PitchReviewEngine = Depends(get_engine),
):
    """
    Fast gate review of a pitch.

    Runs the deterministic intake checks and the advisory LLM pass, then
    writes status, score and flags to the pitch.
    """
    pitch_id = request.pitch_id if request else None
    outcome = engine.fast_gate(pitch_id)
    result = outcome.result

    return GateResponse(
        review_status=result.status,
        quality_score=result.score,
        flags=result.flags,
        is_published=result.is_published,
        rejection_reason=result.rejection_reason,
    )


@app.post("/api/pitches/analyze", response_model=AnalysisResponse, tags=["Review"])
def analyze_pitch(
    request: Optional[PitchIdRequest] = None,
    user: Optional[User] = Depends(get_current_user),
    engine: PitchReviewEngine = Depends(get_engine),
):
    """
    Deep analysis of a pitch.

    Requires an authenticated caller. The founder summary email goes to the
    caller on a best-effort basis.
    """
    pitch_id = request.pitch_id if request else None
    outcome = engine.analyze(pitch_id, user)
    result = outcome.result
    analysis = result.analysis

    return AnalysisResponse(
        analysis=AnalysisBody(
            overall_score=analysis.overall_score,
            clarity_score=analysis.clarity_score,
            completeness_score=analysis.completeness_score,
            market_fit_score=analysis.market_fit_score,
            demo_effectiveness_score=analysis.demo_effectiveness_score or 0,
            demo_feedback=analysis.demo_feedback,
            pitch_description_improvements=analysis.pitch_description_improvements,
            strengths=analysis.strengths,
            improvements=analysis.improvements,
            suggested_category=analysis.suggested_category,
            red_flags=analysis.red_flags,
            message=analysis.message_to_founder or "",
            review_status=result.status,
            is_published=result.is_published,
        )
    )


@app.post("/api/pitches/notify", tags=["Notifications"])
def notify_pitch_review(
    request: Optional[NotifyRequest] = None,
    engine: PitchReviewEngine = Depends(get_engine),
):
    """Create an in-app notification telling the founder about a status"""
    if request is None or not request.pitch_id or not request.status:
        raise MissingPitchIdError(public_message="Missing required fields")

    pitch = engine.store.get_pitch(request.pitch_id)
    if pitch is None or not pitch.founder_id:
        raise PitchNotFoundError(request.pitch_id, public_message="Pitch or founder not found")

    try:
        status = ReviewStatus(request.status)
    except ValueError:
        raise InvalidNotificationError(f"Unknown status {request.status!r}")

    notification = engine.notifier.compose_status_notification(pitch, status, request.feedback)
    engine.notifier.sender.create_notification(notification)
    return {"success": True}


# =============================================================================
# Statistics
# =============================================================================

@app.get("/api/stats", tags=["Info"])
async def get_stats(engine: PitchReviewEngine = Depends(get_engine)):
    """Get engine statistics"""
    return {"engine": engine.get_stats()}


# =============================================================================
# Error Handlers
# =============================================================================

@app.exception_handler(PitchReviewError)
async def review_error_handler(request: Request, exc: PitchReviewError):
    if exc.status_code >= 500:
        log.error("Review request failed: %s", exc, exc_info=exc)
    else:
        log.info("Rejected request to %s: %s", request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    log.error("Unhandled exception: %s", exc, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"},
    )
