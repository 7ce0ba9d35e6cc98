"""Pytest configuration and shared fixtures."""

import pytest

from organizer.config.settings import OrganizerSettings
from organizer.state.models import AppState, Task


@pytest.fixture
def empty_state() -> AppState:
    """Create an empty application state.

    Returns:
        AppState with no entities and a session for user u1.
    """
    return AppState(session={"user_id": "u1"})


@pytest.fixture
def sample_state() -> AppState:
    """Create a state holding two tasks.

    Returns:
        AppState instance for testing.
    """
    return AppState(
        tasks=(
            Task(id="t1", name="Refactor tests", group="g1", owner="u1"),
            Task(id="t2", name="Meet with CTO", group="g2", owner="u1"),
        ),
        session={"user_id": "u1"},
    )


@pytest.fixture
def settings() -> OrganizerSettings:
    """Create settings isolated from the environment.

    Returns:
        OrganizerSettings instance for testing.
    """
    return OrganizerSettings(
        _env_file=None,
        id_strategy="counter",
        id_prefix="T",
        default_owner_id="U1",
        persist_task_updates=False,
    )
