"""organizer コア層."""

from organizer.core.exceptions import (
    ConfigurationError,
    DatabaseConnectionError,
    DispatchInProgressError,
    IdAllocationError,
    OrganizerError,
    PersistenceError,
    StoreError,
)


__all__ = [
    "ConfigurationError",
    "DatabaseConnectionError",
    "DispatchInProgressError",
    "IdAllocationError",
    "OrganizerError",
    "PersistenceError",
    "StoreError",
]
