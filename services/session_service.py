import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple

from pydantic import ValidationError

from models.domain import Exercise, ExerciseLine, SetEntry, Workout, WorkoutSession
from models.enums import SessionStep, WorkoutSplit
from services.line_parser import WorkoutLineParser
from services.repositories import SessionRepository, WorkoutRepository

logger = logging.getLogger(__name__)

UNNAMED_EXERCISE = "unnamed"


class WorkoutSessionService:
    """Manages the lifecycle of in-progress workout sessions, one per chat.

    Every operation reads the stored session, builds a new one and saves it
    back whole; sessions handed out earlier are never modified. Operations
    that need a live session return None when there is none, or when the
    session is not in the required step.
    """

    def __init__(self, sessions: SessionRepository, workouts: WorkoutRepository, parser: WorkoutLineParser):
        """Initializes the service with its dependencies."""
        self.sessions = sessions
        self.workouts = workouts
        self.parser = parser
        self._locks: Dict[int, List] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _locked(self, chat_id: int) -> Iterator[None]:
        """Serializes read-modify-write cycles for one chat."""
        # Each entry is [lock, holders]; it is dropped once nobody holds or waits on it.
        with self._locks_guard:
            entry = self._locks.setdefault(chat_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[chat_id]

    def start(self, chat_id: int, session_date: str) -> WorkoutSession:
        """Creates a fresh session awaiting a split, replacing any previous one."""
        session = WorkoutSession(step=SessionStep.CHOOSE_SPLIT, date=session_date)
        with self._locked(chat_id):
            if self.sessions.get(chat_id) is not None:
                logger.info("Chat %s started a new workout; discarding the unfinished one.", chat_id)
            self.sessions.save(chat_id, session)
        logger.info("Chat %s started a workout for %s.", chat_id, session_date)
        return session

    def get(self, chat_id: int) -> Optional[WorkoutSession]:
        return self.sessions.get(chat_id)

    def set_card_message_id(self, chat_id: int, message_id: int) -> Optional[WorkoutSession]:
        """Remembers which message shows the live card for this session."""
        with self._locked(chat_id):
            current = self.sessions.get(chat_id)
            if current is None:
                return None
            updated = current.model_copy(update={"card_message_id": message_id})
            self.sessions.save(chat_id, updated)
            return updated

    def set_date(self, chat_id: int, session_date: str) -> Optional[WorkoutSession]:
        """Moves the session to another ISO date. Returns None for a bad date."""
        with self._locked(chat_id):
            current = self.sessions.get(chat_id)
            if current is None:
                return None
            try:
                updated = WorkoutSession.model_validate({**current.model_dump(), "date": session_date})
            except ValidationError:
                logger.warning("Chat %s: rejected workout date %r.", chat_id, session_date)
                return None
            self.sessions.save(chat_id, updated)
        logger.info("Chat %s moved its workout to %s.", chat_id, session_date)
        return updated

    def choose_split(self, chat_id: int, split: WorkoutSplit) -> Optional[WorkoutSession]:
        """Tags the session with a split and starts collecting lines."""
        with self._locked(chat_id):
            current = self.sessions.get(chat_id)
            if current is None:
                return None
            updated = current.model_copy(update={"split": split, "step": SessionStep.COLLECTING})
            self.sessions.save(chat_id, updated)
        logger.info("Chat %s chose split '%s'.", chat_id, split.value)
        return updated

    def cancel(self, chat_id: int) -> bool:
        """Drops the chat's session. Returns whether there was one."""
        with self._locked(chat_id):
            existed = self.sessions.get(chat_id) is not None
            self.sessions.remove(chat_id)
        if existed:
            logger.info("Chat %s cancelled its workout.", chat_id)
        return existed

    def add_line(self, chat_id: int, text: str) -> Optional[WorkoutSession]:
        """Adds an exercise name or a set to the session being collected."""
        with self._locked(chat_id):
            current = self.sessions.get(chat_id)
            if current is None or current.step != SessionStep.COLLECTING:
                return None

            parsed = self.parser.parse(text)
            if isinstance(parsed, ExerciseLine):
                updated = current.model_copy(update={
                    "current_exercise": parsed.name,
                    "exercises": self._ensure_exercise(current.exercises, parsed.name),
                })
                logger.debug("Chat %s switched to exercise '%s'.", chat_id, parsed.name)
            else:
                name = current.current_exercise or UNNAMED_EXERCISE
                updated = current.model_copy(update={
                    "current_exercise": name,
                    "exercises": self._append_set(self._ensure_exercise(current.exercises, name), name, parsed.entry),
                })
                logger.debug("Chat %s logged a %s set for '%s'.", chat_id, parsed.entry.kind, name)

            self.sessions.save(chat_id, updated)
            return updated

    def finalize(self, chat_id: int) -> Optional[Workout]:
        """Turns the session into a Workout, saves it and clears the session."""
        with self._locked(chat_id):
            current = self.sessions.get(chat_id)
            if current is None or current.step != SessionStep.COLLECTING or current.split is None:
                return None

            workout = Workout(date=current.date, split=current.split, exercises=current.exercises)
            # A failing save propagates and leaves the session in place.
            self.workouts.save(chat_id, workout)
            try:
                self.sessions.remove(chat_id)
            except Exception:
                logger.error("Chat %s: workout was saved but the session could not be cleared; "
                             "finishing again would save it twice.", chat_id, exc_info=True)
                raise

        logger.info("Chat %s finished a '%s' workout with %d exercises.",
                    chat_id, workout.split.value, len(workout.exercises))
        return workout

    @staticmethod
    def _ensure_exercise(exercises: Tuple[Exercise, ...], name: str) -> Tuple[Exercise, ...]:
        """Appends an empty exercise unless one with this exact name exists."""
        if any(exercise.name == name for exercise in exercises):
            return exercises
        return (*exercises, Exercise(name=name))

    @staticmethod
    def _append_set(exercises: Tuple[Exercise, ...], name: str, entry: SetEntry) -> Tuple[Exercise, ...]:
        return tuple(
            exercise.model_copy(update={"sets": (*exercise.sets, entry)}) if exercise.name == name else exercise
            for exercise in exercises
        )
