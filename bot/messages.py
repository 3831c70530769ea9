# --- Session Start/End (HTML parse mode) ---
PROMPT_SPLIT = "<b>Choose the workout type</b>"
SPLIT_CHOSEN = "Type chosen"
WORKOUT_SAVED = "Saved"
WORKOUT_CANCELLED = "<b>Workout cancelled</b>"
WORKOUT_CANCELLED_SHORT = "Cancelled"

# --- Prompts ---
PROMPT_INPUT = (
    "<b>Input:</b>\n"
    "1) exercise name (a message without digits)\n"
    "2) sets: <code>7.5x20</code>, <code>54 на 15</code>, <code>4 подхода по 12</code>\n\n"
    "<i>Finish: /done</i>"
)

# --- Errors ---
NO_ACTIVE_WORKOUT = "<b>No active workout</b>\n<i>Start one: /w</i>"
NO_ACTIVE_WORKOUT_SHORT = "No active workout"
NOTHING_TO_FINISH = "<b>Nothing to finish</b>\n<i>Start one: /w</i>"
NOTHING_TO_FINISH_SHORT = "Nothing to finish"
UNKNOWN_SPLIT = "Unknown workout type"
ERROR_INVALID_START_DATE = "<b>Invalid date</b>\n<i>Format: /w 04.12.2025</i>"
ERROR_INVALID_DATE = "<b>Invalid date</b>\n<i>Format: /date 04.12.2025</i>"
