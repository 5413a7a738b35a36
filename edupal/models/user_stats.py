"""
User stats and leaderboard models
"""
from sqlalchemy import Column, Integer, Uuid
from edupal.database import Base


class UserStats(Base):
    """
    Per-user counters. Points and streaks are maintained by database triggers;
    this service only reads them and spends download credits.
    """
    __tablename__ = "hub_user_stats"

    user_id = Column(Uuid(as_uuid=True), primary_key=True)
    total_points = Column(Integer, nullable=False, default=0)
    download_credits = Column(Integer, nullable=False, default=0)
    current_streak = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<UserStats(user_id={self.user_id}, points={self.total_points}, credits={self.download_credits})>"


class LeaderboardEntry(Base):
    """
    Read-only mapping of the leaderboard view
    """
    __tablename__ = "hub_leaderboard"
    __table_args__ = {"info": {"is_view": True}}

    user_id = Column(Uuid(as_uuid=True), primary_key=True)
    institution_rank = Column(Integer)
    total_points = Column(Integer)
