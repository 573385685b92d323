"""Repository modules for database access."""

from repositories.project_repository import ProjectRepository
from repositories.settings_repository import SettingsRepository
from repositories.user_repository import UserRepository
from repositories.user_vote_repository import UserVoteRepository
from repositories.voting_repository import VotingRepository

__all__ = [
    "ProjectRepository",
    "SettingsRepository",
    "UserRepository",
    "UserVoteRepository",
    "VotingRepository",
]
