"""
Pydantic schemas for study material generation and quiz scoring
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from uuid import UUID


class GenerateRequest(BaseModel):
    """Request schema for flashcard/quiz generation"""
    resource_id: UUID = Field(..., alias="resourceId")
    type: str = Field(..., pattern="^(flashcards|quiz)$", description="Artifact type")
    force_regenerate: bool = Field(False, alias="forceRegenerate", description="Bypass the cache")

    class Config:
        populate_by_name = True


class GenerateResponse(BaseModel):
    """Generated or cached study material"""
    cached: bool
    content: List[Any]


class ScoreSubmission(BaseModel):
    """Quiz score reported by the client after a quiz is finished"""
    resource_id: UUID = Field(..., alias="resourceId")
    type: str = Field(..., pattern="^(flashcards|quiz)$")
    score: int = Field(..., ge=0)
    total_questions: int = Field(..., ge=1, alias="totalQuestions")

    class Config:
        populate_by_name = True


class ScoreResponse(BaseModel):
    """Result of a score submission with refreshed stats"""
    success: bool = True
    points_awarded: int = Field(..., alias="pointsAwarded")
    stats: Optional[Dict[str, int]] = None
    rank: Optional[int] = None

    class Config:
        populate_by_name = True
