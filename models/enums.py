"""Contains all the Enum definitions for the application domain."""

from enum import Enum


class WorkoutSplit(str, Enum):
    """Training split categories a workout can be tagged with."""
    BACK_TRAPS = ("back_traps", "Back / Traps")
    CHEST_CALVES = ("chest_calves", "Chest / Calves")
    DEADLIFT = ("deadlift", "Deadlift")
    SHOULDERS_ABS = ("shoulders_abs", "Shoulders / Abs")
    LEGS = ("legs", "Legs")
    ARMS = ("arms", "Arms")

    def __new__(cls, value: str, label: str):
        """Override __new__ to allow attaching a display label to each split."""
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.label = label
        return obj


class SessionStep(str, Enum):
    """Steps of an in-progress logging session."""
    IDLE = "idle"
    CHOOSE_SPLIT = "choose_split"
    COLLECTING = "collecting"
