"""Custom exceptions for the organizer state container."""


class OrganizerError(Exception):
    """Base exception for all organizer errors."""


class StoreError(OrganizerError):
    """Base exception for store-related errors."""


class DispatchInProgressError(StoreError):
    """Raised when an action is dispatched while a reducer is running."""

    def __init__(self, action_type: str) -> None:
        """Initialize DispatchInProgressError.

        Args:
            action_type: The type of the action that was dispatched re-entrantly.
        """
        super().__init__(f"Reducers may not dispatch actions: {action_type}")
        self.action_type = action_type


class PersistenceError(OrganizerError):
    """Base exception for persistence-related errors."""


class DatabaseConnectionError(PersistenceError):
    """Raised when the database handle cannot be obtained."""

    def __init__(self, url: str, reason: str = "") -> None:
        """Initialize DatabaseConnectionError.

        Args:
            url: The database URL that could not be reached.
            reason: Underlying failure description.
        """
        message = f"Could not connect to database: {url}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.url = url


class IdAllocationError(OrganizerError):
    """Raised when a new task identifier cannot be allocated."""

    def __init__(self, group_id: str | None, reason: str = "") -> None:
        """Initialize IdAllocationError.

        Args:
            group_id: The group the task was requested for.
            reason: Underlying failure description.
        """
        message = f"Task id allocation failed for group: {group_id}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.group_id = group_id


class ConfigurationError(OrganizerError):
    """Raised when configuration is invalid."""
