"""Grouping services: membership changes, read views and invariant checks."""

from .group_service import GroupBulkResult, GroupDeletion, GroupMembershipManager
from .group_view import GroupViewAggregator
from .validation import find_invariant_violations, is_groupable

__all__ = [
    "GroupBulkResult",
    "GroupDeletion",
    "GroupMembershipManager",
    "GroupViewAggregator",
    "find_invariant_violations",
    "is_groupable",
]
