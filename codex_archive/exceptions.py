"""Custom exception hierarchy for the Codex archive.

Exception Hierarchy:
    CodexError (base)
    ├── StoreError - item store operations
    │   ├── StoreConnectionError
    │   └── StoreQueryError
    ├── GroupingError - group membership rules
    │   ├── NotFoundError
    │   ├── InvalidKindError
    │   ├── AlreadyGroupedError
    │   ├── CrossOwnerError
    │   └── PartialDeleteError (retryable)
    ├── ValidationError - bad input values
    └── ConfigurationError - settings/environment issues

Usage:
    from codex_archive.exceptions import NotFoundError

    raise NotFoundError("Group not found", group_id=group_id)
"""

from typing import Any, Optional


class CodexError(Exception):
    """Base exception for all Codex errors.

    Attributes:
        message: Human-readable error description
        context: Additional context about the error (e.g., IDs)
        retryable: Whether this error might succeed on retry
    """

    def __init__(
        self,
        message: str,
        *,
        retryable: bool = False,
        **context: Any,
    ) -> None:
        self.message = message
        self.context = context
        self.retryable = retryable
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


# =============================================================================
# Store Errors
# =============================================================================


class StoreError(CodexError):
    """Base exception for item store operations."""

    pass


class StoreConnectionError(StoreError):
    """Failed to connect to or access the item store."""

    def __init__(self, message: str = "Item store connection failed", **context: Any) -> None:
        super().__init__(message, retryable=True, **context)


class StoreQueryError(StoreError):
    """A store query failed."""

    def __init__(
        self,
        message: str = "Item store query failed",
        *,
        query: Optional[str] = None,
        **context: Any,
    ) -> None:
        if query:
            query = " ".join(query.split())
            context["query"] = query[:100] + "..." if len(query) > 100 else query
        super().__init__(message, **context)


# =============================================================================
# Grouping Errors
# =============================================================================


class GroupingError(CodexError):
    """Base exception for group membership rule violations."""

    pass


class NotFoundError(GroupingError):
    """An item or group does not exist for the requesting owner.

    Ownership mismatches are reported as not-found so that the existence
    of another user's items is never revealed.
    """

    def __init__(
        self,
        message: str = "Item not found",
        *,
        item_id: Optional[str] = None,
        group_id: Optional[str] = None,
        **context: Any,
    ) -> None:
        if item_id is not None:
            context["item_id"] = item_id
        if group_id is not None:
            context["group_id"] = group_id
        self.item_id = item_id
        self.group_id = group_id
        super().__init__(message, **context)


class InvalidKindError(GroupingError):
    """Grouping was attempted on an item whose kind cannot be grouped."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        kind: Optional[str] = None,
        item_id: Optional[str] = None,
        **context: Any,
    ) -> None:
        if item_id is not None:
            context["item_id"] = item_id
        self.kind = kind
        self.item_id = item_id
        super().__init__(message or f"Items of kind {kind!r} cannot be grouped", **context)


class AlreadyGroupedError(GroupingError):
    """The item is already a group parent or already belongs to a group."""

    def __init__(
        self,
        message: str = "Item is already grouped",
        *,
        item_id: Optional[str] = None,
        group_id: Optional[str] = None,
        **context: Any,
    ) -> None:
        if item_id is not None:
            context["item_id"] = item_id
        if group_id is not None:
            context["group_id"] = group_id
        self.item_id = item_id
        self.group_id = group_id
        super().__init__(message, **context)


class CrossOwnerError(GroupingError):
    """The operation would span items of two different owners."""

    def __init__(
        self,
        message: str = "Operation spans items of different owners",
        *,
        item_id: Optional[str] = None,
        group_id: Optional[str] = None,
        **context: Any,
    ) -> None:
        if item_id is not None:
            context["item_id"] = item_id
        if group_id is not None:
            context["group_id"] = group_id
        super().__init__(message, **context)


class PartialDeleteError(GroupingError):
    """Group deletion stopped part way through.

    ``step`` names the step that failed ("detach_children" or
    "delete_parent") and ``detached`` lists the children already detached.
    Re-running the deletion is safe: detaching is idempotent.
    """

    def __init__(
        self,
        message: str = "Group deletion did not complete",
        *,
        step: str,
        group_id: Optional[str] = None,
        detached: Optional[list[str]] = None,
        **context: Any,
    ) -> None:
        self.step = step
        self.group_id = group_id
        self.detached = list(detached or [])
        context["step"] = step
        if group_id is not None:
            context["group_id"] = group_id
        context["detached"] = len(self.detached)
        super().__init__(message, retryable=True, **context)


# =============================================================================
# Input and Configuration Errors
# =============================================================================


class ValidationError(CodexError):
    """An input value is invalid."""

    def __init__(
        self,
        message: str = "Invalid value",
        *,
        field: Optional[str] = None,
        **context: Any,
    ) -> None:
        if field:
            context["field"] = field
        self.field = field
        super().__init__(message, **context)


class ConfigurationError(CodexError):
    """Configuration or settings error."""

    def __init__(
        self,
        message: str = "Configuration error",
        *,
        setting: Optional[str] = None,
        **context: Any,
    ) -> None:
        if setting:
            context["setting"] = setting
        super().__init__(message, **context)
