from app.db.repositories.user_repository import UserRepository
from app.db.repositories.issue_repository import IssueRepository

__all__ = [
    "UserRepository",
    "IssueRepository",
]
