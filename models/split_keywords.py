"""Keyword table used to recognise a training split from free text.

Order matters: the detector returns the first split with a matching keyword.
"""

from typing import Dict, Tuple

from models.enums import WorkoutSplit

SPLIT_KEYWORDS: Dict[WorkoutSplit, Tuple[str, ...]] = {
    WorkoutSplit.BACK_TRAPS: ("спина", "шраги", "тяга", "верхнего блока", "к поясу", "т-тяга"),
    WorkoutSplit.CHEST_CALVES: ("грудь", "жим", "разводка", "икры", "икронож"),
    WorkoutSplit.DEADLIFT: ("становая", "тяга становая"),
    WorkoutSplit.SHOULDERS_ABS: ("плечи", "дельты", "махи", "пресс", "скручивания", "планка"),
    WorkoutSplit.LEGS: ("ноги", "присед", "выпады", "квадрицепс", "бедра", "ягодицы"),
    WorkoutSplit.ARMS: ("руки", "бицепс", "трицепс", "молот", "сгиб", "разгиб"),
}
