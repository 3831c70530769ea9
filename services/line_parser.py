import logging
import re
from typing import Optional

from models.domain import ExerciseLine, ParsedLine, ParsedSet, RawSet, SetLine

logger = logging.getLogger(__name__)

# Latin and Cyrillic letters only.
LETTER_RE = re.compile(r"[A-Za-zА-Яа-яЁё]")
DIGIT_RE = re.compile(r"[0-9]")
WHITESPACE_RE = re.compile(r"\s+")

NUMBER = r"(?P<w>[0-9]+(?:[.,][0-9]+)?)"
# ASCII word boundary, so a unit glued to the number ("20кг") still ends it.
END = r"(?![0-9A-Za-z_])"

WEIGHT_X_REPS_RE = re.compile(NUMBER + r"\s*[xх×]\s*(?P<r>[0-9]+)" + END)
WEIGHT_NA_REPS_RE = re.compile(NUMBER + r"\s*на\s*(?P<r>[0-9]+)" + END)
SETS_PO_REPS_RE = re.compile(r"(?P<s>[0-9]+)\s*подход[а-я]*\s*по\s*(?P<r>[0-9]+)" + END)
TWO_NUMBERS_RE = re.compile(r"^(?P<s>[0-9]+)\s+(?P<r>[0-9]+)" + END)


class WorkoutLineParser:
    """Turns one free-text chat line into an exercise name or a set entry."""

    def parse(self, text: str) -> ParsedLine:
        """Classifies a line. Never fails; the worst case is a raw set entry."""
        trimmed = text.strip()
        if not trimmed:
            return SetLine(entry=RawSet(raw=text))

        has_letters = LETTER_RE.search(trimmed) is not None
        has_digits = DIGIT_RE.search(trimmed) is not None

        if has_letters and not has_digits:
            return ExerciseLine(name=self._normalize_exercise_name(trimmed))

        try:
            entry = self._structured_entry(trimmed, has_letters)
        except ValueError:
            # int() refuses digit runs past sys.get_int_max_str_digits().
            logger.debug("Numbers in line '%.40s...' are too long to convert.", trimmed)
            entry = None
        if entry is not None:
            return SetLine(entry=entry)

        if has_letters and has_digits:
            return SetLine(entry=ParsedSet(note=trimmed, raw=trimmed))

        logger.debug("No structure found in line '%s', keeping it raw.", trimmed)
        return SetLine(entry=RawSet(raw=trimmed))

    def _structured_entry(self, trimmed: str, has_letters: bool) -> Optional[ParsedSet]:
        """Applies the weight/reps and sets/reps patterns in order."""
        # Weight and reps: "7.5x20", "7,5 × 20", "54 на 15"
        for pattern in (WEIGHT_X_REPS_RE, WEIGHT_NA_REPS_RE):
            match = pattern.search(trimmed)
            if match:
                return ParsedSet(weight=self._to_number(match["w"]), reps=int(match["r"]), raw=trimmed)

        # Sets and reps: "4 подхода по 12", "4 12"
        match = SETS_PO_REPS_RE.search(trimmed)
        if not match and not has_letters:
            match = TWO_NUMBERS_RE.match(trimmed)
        if match:
            return ParsedSet(sets=int(match["s"]), reps=int(match["r"]), raw=trimmed)
        return None

    @staticmethod
    def _normalize_exercise_name(value: str) -> str:
        return WHITESPACE_RE.sub(" ", value).strip()

    @staticmethod
    def _to_number(value: str) -> float:
        return float(value.replace(",", "."))
