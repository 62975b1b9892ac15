from app.domains.issues.entities import Issue, IssuePriority, IssueStatus
from app.domains.issues.duplicates import find_similar, normalize_title
from app.domains.issues.transitions import validate_transition, allowed_targets
from app.domains.issues.view import ALL, IssueFilter, IssueView, visible_issues
from app.domains.issues.snapshot import SnapshotHub

__all__ = [
    "Issue", "IssuePriority", "IssueStatus",
    "find_similar", "normalize_title",
    "validate_transition", "allowed_targets",
    "ALL", "IssueFilter", "IssueView", "visible_issues",
    "SnapshotHub",
]
