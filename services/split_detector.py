import logging
from typing import Mapping, Optional, Tuple

from models.enums import WorkoutSplit
from models.split_keywords import SPLIT_KEYWORDS

logger = logging.getLogger(__name__)


class WorkoutSplitDetector:
    """Guesses the training split from free text by keyword containment."""

    def __init__(self, keywords: Mapping[WorkoutSplit, Tuple[str, ...]] = SPLIT_KEYWORDS):
        self.keywords = keywords

    def detect(self, text: str) -> Optional[WorkoutSplit]:
        """Returns the first split whose keyword occurs anywhere in the text."""
        normalized = text.lower()
        for split, keywords in self.keywords.items():
            if any(keyword in normalized for keyword in keywords):
                logger.debug("Detected split '%s' in '%s'", split.value, text)
                return split
        return None
