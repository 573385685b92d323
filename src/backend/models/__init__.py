"""Database models module."""

from models.user import User, UserRole
from models.project import Project
from models.voting import Voting, VotingOption, VotingStatus
from models.user_vote import UserVote
from models.settings import AppConfig, AppText, FeatureFlag, NavigationTab, ThemeSetting

__all__ = [
    "User",
    "UserRole",
    "Project",
    "Voting",
    "VotingOption",
    "VotingStatus",
    "UserVote",
    "FeatureFlag",
    "AppText",
    "ThemeSetting",
    "NavigationTab",
    "AppConfig",
]
