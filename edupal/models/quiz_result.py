"""
QuizResult model - one row per quiz attempt
"""
from sqlalchemy import Column, Integer, TIMESTAMP, ForeignKey, Uuid, func
from edupal.database import Base
import uuid


class QuizResult(Base):
    """
    Quiz results table - append-only; point awarding happens in a database trigger
    """
    __tablename__ = "hub_user_quiz_results"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    quiz_id = Column(Uuid(as_uuid=True), ForeignKey("hub_ai_quizzes.id"), nullable=False)
    score = Column(Integer, nullable=False)
    total_questions = Column(Integer, nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())

    def __repr__(self):
        return f"<QuizResult(user_id={self.user_id}, quiz_id={self.quiz_id}, score={self.score}/{self.total_questions})>"
