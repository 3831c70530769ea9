import pytest

from services.line_parser import WorkoutLineParser
from services.repositories import InMemorySessionRepository, InMemoryWorkoutRepository
from services.session_service import WorkoutSessionService


@pytest.fixture
def sessions():
    return InMemorySessionRepository()


@pytest.fixture
def workouts():
    return InMemoryWorkoutRepository()


@pytest.fixture
def service(sessions, workouts):
    return WorkoutSessionService(sessions, workouts, WorkoutLineParser())
