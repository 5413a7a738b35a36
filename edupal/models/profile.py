"""
Profile model - only the role is needed here
"""
from sqlalchemy import Column, String, Uuid
from edupal.database import Base

ADMIN_ROLES = ("admin", "school_admin", "super_admin")


class Profile(Base):
    __tablename__ = "hub_profiles"

    id = Column(Uuid(as_uuid=True), primary_key=True)
    role = Column(String(30), default="student")

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    def __repr__(self):
        return f"<Profile(id={self.id}, role={self.role})>"
