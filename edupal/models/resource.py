"""
Resource model - uploaded academic documents
"""
from sqlalchemy import Column, String, Integer, Text, TIMESTAMP, Uuid, func
from edupal.database import Base
import uuid


class Resource(Base):
    """
    Resources table - owned by the library; the file itself lives in object storage
    """
    __tablename__ = "hub_resources"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255))
    file_url = Column(Text)  # public storage URL, ".../resources/<path>"
    download_count = Column(Integer, nullable=False, default=0)
    created_at = Column(TIMESTAMP, server_default=func.now())

    def __repr__(self):
        return f"<Resource(id={self.id}, title={self.title})>"
