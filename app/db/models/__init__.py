from app.db.models.user import User
from app.db.models.issue import Issue

__all__ = [
    "User",
    "Issue",
]
