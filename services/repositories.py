"""
Storage interfaces used by the session service, plus in-memory defaults.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from models.domain import Workout, WorkoutSession

logger = logging.getLogger(__name__)


class SessionRepository(ABC):
    """Holds at most one in-progress session per chat."""

    @abstractmethod
    def get(self, chat_id: int) -> Optional[WorkoutSession]:
        ...

    @abstractmethod
    def save(self, chat_id: int, session: WorkoutSession) -> None:
        """Replaces the stored session for the chat as a whole."""

    @abstractmethod
    def remove(self, chat_id: int) -> None:
        """Deletes the chat's session; a no-op when there is none."""


class WorkoutRepository(ABC):
    """Append-only store of finished workouts per chat."""

    @abstractmethod
    def save(self, chat_id: int, workout: Workout) -> None:
        ...

    @abstractmethod
    def list_for(self, chat_id: int) -> List[Workout]:
        """Returns the chat's workouts in the order they were saved."""


class InMemorySessionRepository(SessionRepository):

    def __init__(self) -> None:
        self._sessions: Dict[int, WorkoutSession] = {}

    def get(self, chat_id: int) -> Optional[WorkoutSession]:
        return self._sessions.get(chat_id)

    def save(self, chat_id: int, session: WorkoutSession) -> None:
        self._sessions[chat_id] = session

    def remove(self, chat_id: int) -> None:
        self._sessions.pop(chat_id, None)


class InMemoryWorkoutRepository(WorkoutRepository):

    def __init__(self) -> None:
        self._workouts: Dict[int, List[Workout]] = {}

    def save(self, chat_id: int, workout: Workout) -> None:
        self._workouts[chat_id] = [*self._workouts.get(chat_id, []), workout]
        logger.debug("Chat %s now has %d workouts in memory.", chat_id, len(self._workouts[chat_id]))

    def list_for(self, chat_id: int) -> List[Workout]:
        return list(self._workouts.get(chat_id, []))
