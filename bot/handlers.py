import logging
from typing import List, Optional

from telegram import Update
from telegram.constants import ParseMode
from telegram.error import BadRequest, TelegramError
from telegram.ext import (
    BaseHandler,
    CallbackContext,
    CallbackQueryHandler,
    CommandHandler,
    MessageHandler,
    filters,
)

from bot import messages
from bot.formatters import WorkoutFormatter
from bot.keyboards import (
    CANCEL_CALLBACK,
    DONE_CALLBACK,
    SPLIT_CALLBACK_PREFIX,
    create_control_keyboard,
    create_split_keyboard,
    parse_split_callback,
)
from bot.utils import parse_display_date, today_iso
from models.domain import Workout, WorkoutSession
from models.enums import SessionStep, WorkoutSplit
from services.session_service import WorkoutSessionService
from services.split_detector import WorkoutSplitDetector

logger = logging.getLogger(__name__)


# --- Helper Functions ---

async def _refresh_card(context: CallbackContext, chat_id: int, session: WorkoutSession,
        formatter: WorkoutFormatter) -> None:
    """Re-renders the live card, if the session has one."""
    if session.card_message_id is None:
        return
    try:
        await context.bot.edit_message_text(
            formatter.to_card(session),
            chat_id=chat_id,
            message_id=session.card_message_id,
            parse_mode=ParseMode.HTML,
            reply_markup=create_control_keyboard(),
        )
    except BadRequest as exc:
        # Deleted card or "message is not modified"; the next edit retries.
        logger.debug("Could not edit card for chat %s: %s", chat_id, exc)


async def _publish_workout(update: Update, context: CallbackContext, workout: Workout,
        formatter: WorkoutFormatter, manager_chat_id: Optional[int]) -> None:
    """Sends the summary to the user and, when configured, to the manager chat."""
    message = formatter.to_workout_message(workout)
    await update.effective_message.reply_text(message, parse_mode=ParseMode.HTML)

    if manager_chat_id is None:
        return
    try:
        await context.bot.send_message(manager_chat_id, message, parse_mode=ParseMode.HTML)
    except TelegramError as exc:
        logger.warning("Could not forward workout to manager chat %s: %s", manager_chat_id, exc)


async def _apply_split(update: Update, context: CallbackContext, split: WorkoutSplit,
        service: WorkoutSessionService, formatter: WorkoutFormatter) -> Optional[WorkoutSession]:
    """Chooses the split, refreshes the card and explains the input format."""
    chat_id = update.effective_chat.id
    session = service.choose_split(chat_id, split)
    if session is None:
        return None
    await _refresh_card(context, chat_id, session, formatter)
    await update.effective_message.reply_text(messages.PROMPT_INPUT, parse_mode=ParseMode.HTML)
    return session


# --- Command Handlers ---

async def start_workout_command(update: Update, context: CallbackContext,
        service: WorkoutSessionService, formatter: WorkoutFormatter):
    """/w [DD.MM.YYYY]: starts a new workout, today by default."""
    chat_id = update.effective_chat.id
    arg = " ".join(context.args or [])
    session_date = parse_display_date(arg) if arg else today_iso()
    if session_date is None:
        logger.warning("Chat %s sent an invalid start date: %s", chat_id, arg)
        await update.message.reply_text(messages.ERROR_INVALID_START_DATE, parse_mode=ParseMode.HTML)
        return

    session = service.start(chat_id, session_date)
    card = await update.message.reply_text(
        formatter.to_card(session), parse_mode=ParseMode.HTML, reply_markup=create_split_keyboard()
    )
    service.set_card_message_id(chat_id, card.message_id)
    await update.message.reply_text(messages.PROMPT_SPLIT, parse_mode=ParseMode.HTML)


async def set_date_command(update: Update, context: CallbackContext,
        service: WorkoutSessionService, formatter: WorkoutFormatter):
    """/date DD.MM.YYYY: moves the active workout to another day."""
    chat_id = update.effective_chat.id
    if service.get(chat_id) is None:
        await update.message.reply_text(messages.NO_ACTIVE_WORKOUT, parse_mode=ParseMode.HTML)
        return

    arg = " ".join(context.args or [])
    session_date = parse_display_date(arg)
    if session_date is None:
        logger.warning("Chat %s sent an invalid date: %s", chat_id, arg)
        await update.message.reply_text(messages.ERROR_INVALID_DATE, parse_mode=ParseMode.HTML)
        return

    session = service.set_date(chat_id, session_date)
    if session is not None:
        await _refresh_card(context, chat_id, session, formatter)


async def done_command(update: Update, context: CallbackContext, service: WorkoutSessionService,
        formatter: WorkoutFormatter, manager_chat_id: Optional[int]):
    """/done: finishes and saves the active workout."""
    workout = service.finalize(update.effective_chat.id)
    if workout is None:
        await update.message.reply_text(messages.NOTHING_TO_FINISH, parse_mode=ParseMode.HTML)
        return
    await _publish_workout(update, context, workout, formatter, manager_chat_id)


async def cancel_command(update: Update, context: CallbackContext, service: WorkoutSessionService):
    """/cancel: drops the active workout without saving it."""
    had_session = service.cancel(update.effective_chat.id)
    text = messages.WORKOUT_CANCELLED if had_session else messages.NO_ACTIVE_WORKOUT
    await update.message.reply_text(text, parse_mode=ParseMode.HTML)


# --- Callback Handlers ---

async def split_selected(update: Update, context: CallbackContext,
        service: WorkoutSessionService, formatter: WorkoutFormatter):
    """Handles a press on the split keyboard."""
    query = update.callback_query
    split = parse_split_callback(query.data)
    if split is None:
        logger.warning("Unknown split callback: %s", query.data)
        await query.answer(messages.UNKNOWN_SPLIT)
        return

    session = await _apply_split(update, context, split, service, formatter)
    await query.answer(messages.SPLIT_CHOSEN if session else messages.NO_ACTIVE_WORKOUT_SHORT)


async def done_selected(update: Update, context: CallbackContext, service: WorkoutSessionService,
        formatter: WorkoutFormatter, manager_chat_id: Optional[int]):
    """Handles the 'Finish' button under the card."""
    query = update.callback_query
    workout = service.finalize(update.effective_chat.id)
    if workout is None:
        await query.answer(messages.NOTHING_TO_FINISH_SHORT)
        return

    try:
        await query.edit_message_reply_markup(reply_markup=None)
    except BadRequest as exc:
        logger.debug("Could not remove card keyboard: %s", exc)
    await _publish_workout(update, context, workout, formatter, manager_chat_id)
    await query.answer(messages.WORKOUT_SAVED)


async def cancel_selected(update: Update, context: CallbackContext, service: WorkoutSessionService):
    """Handles the 'Cancel' button under the card."""
    query = update.callback_query
    service.cancel(update.effective_chat.id)
    await query.edit_message_text(messages.WORKOUT_CANCELLED, parse_mode=ParseMode.HTML)
    await query.answer(messages.WORKOUT_CANCELLED_SHORT)


# --- Message Handlers ---

async def received_line(update: Update, context: CallbackContext, service: WorkoutSessionService,
        formatter: WorkoutFormatter, detector: WorkoutSplitDetector):
    """Routes a plain text message according to the session step."""
    chat_id = update.effective_chat.id
    session = service.get(chat_id)
    if session is None:
        return

    text = (update.message.text or "").strip()
    if not text:
        return

    if session.step == SessionStep.CHOOSE_SPLIT:
        split = detector.detect(text)
        if split is not None:
            logger.debug("Chat %s typed a split: '%s' -> %s", chat_id, text, split.value)
            await _apply_split(update, context, split, service, formatter)
        return

    session = service.add_line(chat_id, text)
    if session is not None:
        await _refresh_card(context, chat_id, session, formatter)


def get_workout_handlers(service: WorkoutSessionService, formatter: WorkoutFormatter,
        detector: WorkoutSplitDetector, manager_chat_id: Optional[int] = None) -> List[BaseHandler]:
    """Creates and returns all handlers of the workout logging flow."""

    # --- Handler setup using lambdas for dependency injection ---
    start_handler = lambda u, c: start_workout_command(u, c, service=service, formatter=formatter)
    date_handler = lambda u, c: set_date_command(u, c, service=service, formatter=formatter)
    done_handler = lambda u, c: done_command(u, c, service=service, formatter=formatter,
            manager_chat_id=manager_chat_id)
    cancel_handler = lambda u, c: cancel_command(u, c, service=service)
    split_handler = lambda u, c: split_selected(u, c, service=service, formatter=formatter)
    done_button_handler = lambda u, c: done_selected(u, c, service=service, formatter=formatter,
            manager_chat_id=manager_chat_id)
    cancel_button_handler = lambda u, c: cancel_selected(u, c, service=service)
    line_handler = lambda u, c: received_line(u, c, service=service, formatter=formatter, detector=detector)

    return [
        CommandHandler("w", start_handler),
        CommandHandler("date", date_handler),
        CommandHandler("done", done_handler),
        CommandHandler("cancel", cancel_handler),
        CallbackQueryHandler(split_handler, pattern=f"^{SPLIT_CALLBACK_PREFIX}"),
        CallbackQueryHandler(done_button_handler, pattern=f"^{DONE_CALLBACK}$"),
        CallbackQueryHandler(cancel_button_handler, pattern=f"^{CANCEL_CALLBACK}$"),
        MessageHandler(filters.TEXT & ~filters.COMMAND, line_handler),
    ]
