"""Pydantic models representing the core data structures of a workout."""

import re
from datetime import date
from typing import Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing_extensions import Annotated

from models.enums import SessionStep, WorkoutSplit


ISO_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


def _validate_iso_date(value: str) -> str:
    """Accepts only calendar-valid YYYY-MM-DD strings."""
    if not ISO_DATE_RE.fullmatch(value):
        raise ValueError(f"Expected YYYY-MM-DD, got '{value}'")
    date.fromisoformat(value)
    return value


# --- Set entries ---

class ParsedSet(_Frozen):
    """A set with whatever numbers could be pulled out of the line."""
    kind: Literal["parsed"] = "parsed"
    weight: Optional[float] = None
    reps: Optional[int] = None
    sets: Optional[int] = None
    note: Optional[str] = None
    raw: str


class RawSet(_Frozen):
    """A set line nothing structured could be extracted from."""
    kind: Literal["raw"] = "raw"
    raw: str


SetEntry = Annotated[Union[ParsedSet, RawSet], Field(discriminator="kind")]


# --- Parsed lines ---

class ExerciseLine(_Frozen):
    kind: Literal["exercise"] = "exercise"
    name: str


class SetLine(_Frozen):
    kind: Literal["set"] = "set"
    entry: SetEntry


ParsedLine = Annotated[Union[ExerciseLine, SetLine], Field(discriminator="kind")]


# --- Workout structures ---

class Exercise(_Frozen):
    """An exercise and the sets logged for it, in entry order."""
    name: str = Field(min_length=1)
    sets: Tuple[SetEntry, ...] = ()


class Workout(_Frozen):
    """The finalized record of a completed logging session."""
    date: str
    split: WorkoutSplit
    exercises: Tuple[Exercise, ...] = ()

    @field_validator("date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        return _validate_iso_date(value)


class WorkoutSession(_Frozen):
    """Working state of one conversation between /w and /done or /cancel."""
    step: SessionStep = SessionStep.CHOOSE_SPLIT
    date: str
    split: Optional[WorkoutSplit] = None
    current_exercise: Optional[str] = None
    exercises: Tuple[Exercise, ...] = ()
    card_message_id: Optional[int] = None

    @field_validator("date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        return _validate_iso_date(value)

    @model_validator(mode="after")
    def _check_invariants(self) -> "WorkoutSession":
        if self.step == SessionStep.IDLE:
            raise ValueError("An idle session is never stored")
        if self.step == SessionStep.COLLECTING and self.split is None:
            raise ValueError("A collecting session must have a split")
        names = [exercise.name for exercise in self.exercises]
        if len(names) != len(set(names)):
            raise ValueError("Exercise names must be unique within a session")
        return self

    def find_exercise(self, name: str) -> Optional[Exercise]:
        """Returns the exercise with exactly this name, if present."""
        for exercise in self.exercises:
            if exercise.name == name:
                return exercise
        return None
