"""
Quiz score submission
"""
import logging
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from edupal.exceptions import NotFoundError, PersistenceError
from edupal.models import LeaderboardEntry, QuizResult, StudyArtifact, UserStats

logger = logging.getLogger(__name__)


def record_quiz_result(
    db: Session,
    user_id: UUID,
    resource_id: UUID,
    artifact_type: str,
    score: int,
    total_questions: int
) -> QuizResult:
    """
    Append a quiz attempt for the artifact generated from resource_id

    Raises:
        NotFoundError: no artifact exists yet for (resource, type)
        PersistenceError: the row could not be written
    """
    quiz = db.query(StudyArtifact).filter(
        StudyArtifact.resource_id == resource_id,
        StudyArtifact.type == artifact_type
    ).first()

    if not quiz:
        raise NotFoundError("Quiz not found for this resource")

    result = QuizResult(
        user_id=user_id,
        quiz_id=quiz.id,
        score=score,
        total_questions=total_questions
    )

    try:
        db.add(result)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to save quiz result for user {user_id}: {str(e)}")
        raise PersistenceError("Failed to save score")

    logger.info(f"Quiz result saved: user={user_id}, quiz={quiz.id}, score={score}/{total_questions}")
    return result


def get_user_standing(db: Session, user_id: UUID) -> Dict[str, Any]:
    """
    Stats and leaderboard rank after a submission

    Both are maintained by database triggers; missing rows or an unavailable
    view yield None rather than an error.
    """
    stats: Optional[Dict[str, int]] = None
    rank: Optional[int] = None

    try:
        row = db.query(UserStats).filter(UserStats.user_id == user_id).first()
        if row:
            stats = {
                "total_points": row.total_points,
                "download_credits": row.download_credits,
                "current_streak": row.current_streak,
            }
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Failed to read stats for user {user_id}: {str(e)}")

    try:
        entry = db.query(LeaderboardEntry).filter(LeaderboardEntry.user_id == user_id).first()
        if entry:
            rank = entry.institution_rank
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Failed to read leaderboard rank for user {user_id}: {str(e)}")

    return {"stats": stats, "rank": rank}
