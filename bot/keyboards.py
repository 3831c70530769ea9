"""Functions for generating interactive keyboards for the Telegram bot."""

from typing import Optional

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from bot.utils import chunk_list
from models.enums import WorkoutSplit

SPLIT_CALLBACK_PREFIX = "split:"
DONE_CALLBACK = "workout:done"
CANCEL_CALLBACK = "workout:cancel"


def create_split_keyboard() -> InlineKeyboardMarkup:
    """Creates a keyboard with one button per split, two per row."""
    buttons = [
        InlineKeyboardButton(split.label, callback_data=f"{SPLIT_CALLBACK_PREFIX}{split.value}")
        for split in WorkoutSplit
    ]
    return InlineKeyboardMarkup(chunk_list(buttons, 2))


def create_control_keyboard() -> InlineKeyboardMarkup:
    """Creates the 'Finish'/'Cancel' keyboard shown under the live card."""
    keyboard = [
        [
            InlineKeyboardButton("✅ Finish", callback_data=DONE_CALLBACK),
            InlineKeyboardButton("❌ Cancel", callback_data=CANCEL_CALLBACK),
        ]
    ]
    return InlineKeyboardMarkup(keyboard)


def parse_split_callback(data: str) -> Optional[WorkoutSplit]:
    """Maps 'split:<value>' callback data back to a split, if it names one."""
    if not data.startswith(SPLIT_CALLBACK_PREFIX):
        return None
    try:
        return WorkoutSplit(data[len(SPLIT_CALLBACK_PREFIX):])
    except ValueError:
        return None
