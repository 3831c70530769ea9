"""
Renders sessions and workouts as HTML for Telegram (parse_mode=HTML).
"""
import html
from typing import Iterable, List

from bot.utils import to_display_date
from models.domain import Exercise, ParsedSet, RawSet, SetEntry, Workout, WorkoutSession
from models.enums import SessionStep


class WorkoutFormatter:
    """Formats domain objects into user-facing messages."""

    def to_card(self, session: WorkoutSession) -> str:
        """Builds the live card that is edited after every change."""
        split_label = session.split.label if session.split else "not chosen"
        lines = [
            "<b>WORKOUT</b>",
            "",
            f"Date: <b>{to_display_date(session.date)}</b>",
            f"Type: <b>{split_label}</b>",
            "",
        ]
        lines += self._format_exercises(session.exercises)

        if session.step == SessionStep.COLLECTING:
            current = self._escape(session.current_exercise or "not chosen")
            lines.append(f"<i>Current exercise:</i> <b>{current}</b>")

        return "<blockquote>" + "\n".join(lines) + "</blockquote>"

    def to_workout_message(self, workout: Workout) -> str:
        """Builds the summary sent once a workout is finished."""
        lines = [
            "<b>Workout</b>",
            f"Date: <b>{to_display_date(workout.date)}</b>",
            f"Type: <b>{workout.split.label}</b>",
            "",
        ]
        lines += self._format_exercises(workout.exercises)
        return "\n".join(lines)

    def format_set(self, entry: SetEntry) -> str:
        """Formats a single set entry, preferring the structured fields."""
        if isinstance(entry, RawSet):
            return self._escape(entry.raw)

        if isinstance(entry, ParsedSet):
            if entry.weight is not None and entry.reps is not None:
                return f"{self._clean_number(entry.weight)} × {entry.reps}"
            if entry.sets is not None and entry.reps is not None:
                return f"{entry.sets} sets × {entry.reps}"
            if entry.note:
                return self._escape(entry.note)
            return self._escape(entry.raw)

        raise TypeError(f"Unknown set entry: {entry!r}")

    def _format_exercises(self, exercises: Iterable[Exercise]) -> List[str]:
        lines: List[str] = []
        for exercise in exercises:
            lines.append(f"<b>{self._escape(exercise.name)}</b>")
            lines += [f"- {self.format_set(entry)}" for entry in exercise.sets]
            lines.append("")
        return lines

    @staticmethod
    def _clean_number(value: float) -> str:
        """Drops a trailing '.0' from whole weights."""
        return str(int(value)) if value.is_integer() else str(value)

    @staticmethod
    def _escape(value: str) -> str:
        return html.escape(value, quote=False)
