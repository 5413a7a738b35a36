"""
Study material generation and quiz scoring API endpoints
"""
from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session
from typing import Optional
import logging

from edupal.config import settings
from edupal.database import get_db
from edupal.dependencies import (
    generation_rate_limiter,
    get_current_user_id,
    get_storage,
    get_study_service,
)
from edupal.schemas.study import (
    GenerateRequest,
    GenerateResponse,
    ScoreSubmission,
    ScoreResponse,
)
from edupal.services.artifact_service import StudyMaterialService
from edupal.services.score_service import get_user_standing, record_quiz_result
from edupal.services.storage_service import SupabaseStorage

router = APIRouter(prefix="/api/study", tags=["study"])
logger = logging.getLogger(__name__)


@router.post(
    "/generate",
    response_model=GenerateResponse,
    dependencies=[Depends(generation_rate_limiter)]
)
def generate_study_material(
    request: GenerateRequest,
    service: StudyMaterialService = Depends(get_study_service)
):
    """
    Generate flashcards or a quiz from a resource's document

    - Returns the stored artifact when one exists (cached: true)
    - forceRegenerate re-runs extraction and generation and overwrites it
    - Supports PDF, DOCX and plain text files
    """
    cached, content = service.get_or_generate(
        request.resource_id,
        request.type,
        force_regenerate=request.force_regenerate
    )
    return GenerateResponse(cached=cached, content=content)


@router.post("/score", response_model=ScoreResponse)
def submit_score(
    submission: ScoreSubmission,
    authorization: Optional[str] = Header(None),
    storage: Optional[SupabaseStorage] = Depends(get_storage),
    db: Session = Depends(get_db)
):
    """
    Record a finished quiz attempt

    Points are awarded by a database trigger; the response carries the
    refreshed stats and leaderboard rank.
    """
    # The body is validated before the caller is authenticated
    user_id = get_current_user_id(authorization, storage)

    record_quiz_result(
        db,
        user_id=user_id,
        resource_id=submission.resource_id,
        artifact_type=submission.type,
        score=submission.score,
        total_questions=submission.total_questions
    )

    standing = get_user_standing(db, user_id)

    return ScoreResponse(
        success=True,
        points_awarded=settings.QUIZ_COMPLETION_POINTS,
        stats=standing["stats"],
        rank=standing["rank"]
    )
