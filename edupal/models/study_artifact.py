"""
StudyArtifact model - cached AI-generated flashcards and quizzes
"""
from sqlalchemy import Column, String, TIMESTAMP, ForeignKey, UniqueConstraint, Uuid
from edupal.database import Base, JSONType
import uuid


class StudyArtifact(Base):
    """
    One generated artifact per (resource, type); overwritten on forced regeneration
    """
    __tablename__ = "hub_ai_quizzes"
    __table_args__ = (
        UniqueConstraint("resource_id", "type", name="uq_hub_ai_quizzes_resource_type"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    resource_id = Column(Uuid(as_uuid=True), ForeignKey("hub_resources.id"), nullable=False, index=True)
    type = Column(String(20), nullable=False)  # flashcards | quiz
    content = Column(JSONType, nullable=False)
    generated_at = Column(TIMESTAMP, nullable=False)

    def __repr__(self):
        return f"<StudyArtifact(id={self.id}, resource_id={self.resource_id}, type={self.type})>"
