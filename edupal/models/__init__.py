"""
Database models package
"""
from edupal.models.resource import Resource
from edupal.models.study_artifact import StudyArtifact
from edupal.models.quiz_result import QuizResult
from edupal.models.user_stats import UserStats, LeaderboardEntry
from edupal.models.profile import Profile
from edupal.models.subscription import SubscriptionPlan, Subscription

__all__ = [
    "Resource",
    "StudyArtifact",
    "QuizResult",
    "UserStats",
    "LeaderboardEntry",
    "Profile",
    "SubscriptionPlan",
    "Subscription",
]
