"""
Tests for the Telegram handlers with mocked Update and context objects.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest
from telegram.error import BadRequest, Forbidden

from bot import handlers, messages
from bot.formatters import WorkoutFormatter
from bot.keyboards import CANCEL_CALLBACK, DONE_CALLBACK
from models.enums import SessionStep, WorkoutSplit
from services.split_detector import WorkoutSplitDetector

CHAT = 77


def make_update(text=None, callback_data=None):
    update = MagicMock()
    update.effective_chat.id = CHAT
    update.message.text = text
    update.message.reply_text = AsyncMock(return_value=MagicMock(message_id=501))
    update.effective_message = update.message
    if callback_data is None:
        update.callback_query = None
    else:
        update.callback_query.data = callback_data
        update.callback_query.answer = AsyncMock()
        update.callback_query.edit_message_text = AsyncMock()
        update.callback_query.edit_message_reply_markup = AsyncMock()
    return update


def make_context(args=None):
    context = MagicMock()
    context.args = args or []
    context.bot.edit_message_text = AsyncMock()
    context.bot.send_message = AsyncMock()
    return context


@pytest.fixture
def formatter():
    return WorkoutFormatter()


@pytest.fixture
def detector():
    return WorkoutSplitDetector()


async def _start_collecting(service, formatter, split=WorkoutSplit.LEGS):
    await handlers.start_workout_command(make_update("/w"), make_context(), service, formatter)
    service.choose_split(CHAT, split)


class TestStartCommand:

    @pytest.mark.asyncio
    async def test_start_sends_card_and_stores_its_id(self, service, formatter):
        update = make_update("/w 04.12.2025")

        await handlers.start_workout_command(update, make_context(["04.12.2025"]), service, formatter)

        session = service.get(CHAT)
        assert session.date == "2025-12-04"
        assert session.card_message_id == 501
        card_call, prompt_call = update.message.reply_text.call_args_list
        assert "04.12.2025" in card_call.args[0]
        assert card_call.kwargs["reply_markup"] is not None
        assert prompt_call.args[0] == messages.PROMPT_SPLIT

    @pytest.mark.asyncio
    async def test_invalid_date_creates_nothing(self, service, formatter):
        update = make_update("/w 31.02.2025")

        await handlers.start_workout_command(update, make_context(["31.02.2025"]), service, formatter)

        assert service.get(CHAT) is None
        assert update.message.reply_text.call_args.args[0] == messages.ERROR_INVALID_START_DATE


class TestDateCommand:

    @pytest.mark.asyncio
    async def test_without_session(self, service, formatter):
        update = make_update("/date 01.01.2025")

        await handlers.set_date_command(update, make_context(["01.01.2025"]), service, formatter)

        assert update.message.reply_text.call_args.args[0] == messages.NO_ACTIVE_WORKOUT

    @pytest.mark.asyncio
    async def test_invalid_date_leaves_session(self, service, formatter):
        service.start(CHAT, "2024-06-01")
        update = make_update("/date soon")

        await handlers.set_date_command(update, make_context(["soon"]), service, formatter)

        assert service.get(CHAT).date == "2024-06-01"
        assert update.message.reply_text.call_args.args[0] == messages.ERROR_INVALID_DATE

    @pytest.mark.asyncio
    async def test_valid_date_updates_card(self, service, formatter):
        service.start(CHAT, "2024-06-01")
        service.set_card_message_id(CHAT, 501)
        context = make_context(["02.06.2024"])

        await handlers.set_date_command(make_update("/date 02.06.2024"), context, service, formatter)

        assert service.get(CHAT).date == "2024-06-02"
        assert context.bot.edit_message_text.call_args.kwargs["message_id"] == 501


class TestLines:

    @pytest.mark.asyncio
    async def test_line_is_added_and_card_edited(self, service, formatter, detector):
        await _start_collecting(service, formatter)
        context = make_context()

        await handlers.received_line(make_update("Squat"), context, service, formatter, detector)
        await handlers.received_line(make_update("100x5"), context, service, formatter, detector)

        squat = service.get(CHAT).find_exercise("Squat")
        assert squat.sets[0].weight == 100.0
        assert "100 × 5" in context.bot.edit_message_text.call_args.args[0]

    @pytest.mark.asyncio
    async def test_card_edit_errors_are_ignored(self, service, formatter, detector):
        await _start_collecting(service, formatter)
        context = make_context()
        context.bot.edit_message_text.side_effect = BadRequest("Message is not modified")

        await handlers.received_line(make_update("Squat"), context, service, formatter, detector)

        assert service.get(CHAT).current_exercise == "Squat"

    @pytest.mark.asyncio
    async def test_typed_split_is_detected(self, service, formatter, detector):
        await handlers.start_workout_command(make_update("/w"), make_context(), service, formatter)
        update = make_update("сегодня ноги")

        await handlers.received_line(update, make_context(), service, formatter, detector)

        session = service.get(CHAT)
        assert session.step == SessionStep.COLLECTING
        assert session.split == WorkoutSplit.LEGS
        assert update.message.reply_text.call_args.args[0] == messages.PROMPT_INPUT

    @pytest.mark.asyncio
    async def test_unrecognised_text_before_split_is_ignored(self, service, formatter, detector):
        await handlers.start_workout_command(make_update("/w"), make_context(), service, formatter)
        update = make_update("hello")

        await handlers.received_line(update, make_context(), service, formatter, detector)

        assert service.get(CHAT).step == SessionStep.CHOOSE_SPLIT
        update.message.reply_text.assert_not_called()

    @pytest.mark.asyncio
    async def test_text_without_session_is_ignored(self, service, formatter, detector):
        update = make_update("Squat")

        await handlers.received_line(update, make_context(), service, formatter, detector)

        update.message.reply_text.assert_not_called()


class TestDoneAndCancel:

    @pytest.mark.asyncio
    async def test_done_publishes_and_forwards(self, service, workouts, formatter):
        await _start_collecting(service, formatter)
        service.add_line(CHAT, "Squat")
        update = make_update("/done")
        context = make_context()

        await handlers.done_command(update, context, service, formatter, manager_chat_id=1000)

        assert len(workouts.list_for(CHAT)) == 1
        summary = update.message.reply_text.call_args.args[0]
        assert "<b>Squat</b>" in summary
        context.bot.send_message.assert_awaited_once()
        assert context.bot.send_message.call_args.args[:2] == (1000, summary)

    @pytest.mark.asyncio
    async def test_forward_failure_does_not_break_done(self, service, workouts, formatter):
        await _start_collecting(service, formatter)
        context = make_context()
        context.bot.send_message.side_effect = Forbidden("bot was blocked")

        await handlers.done_command(make_update("/done"), context, service, formatter, manager_chat_id=1000)

        assert service.get(CHAT) is None
        assert len(workouts.list_for(CHAT)) == 1

    @pytest.mark.asyncio
    async def test_done_without_session(self, service, formatter):
        update = make_update("/done")

        await handlers.done_command(update, make_context(), service, formatter, manager_chat_id=None)

        assert update.message.reply_text.call_args.args[0] == messages.NOTHING_TO_FINISH

    @pytest.mark.asyncio
    async def test_cancel_replies_by_state(self, service):
        service.start(CHAT, "2024-06-01")
        first, second = make_update("/cancel"), make_update("/cancel")

        await handlers.cancel_command(first, make_context(), service)
        await handlers.cancel_command(second, make_context(), service)

        assert first.message.reply_text.call_args.args[0] == messages.WORKOUT_CANCELLED
        assert second.message.reply_text.call_args.args[0] == messages.NO_ACTIVE_WORKOUT


class TestCallbacks:

    @pytest.mark.asyncio
    async def test_split_button(self, service, formatter):
        service.start(CHAT, "2024-06-01")
        update = make_update(callback_data="split:arms")

        await handlers.split_selected(update, make_context(), service, formatter)

        assert service.get(CHAT).split == WorkoutSplit.ARMS
        update.callback_query.answer.assert_awaited_once_with(messages.SPLIT_CHOSEN)

    @pytest.mark.asyncio
    async def test_split_button_without_session(self, service, formatter):
        update = make_update(callback_data="split:arms")

        await handlers.split_selected(update, make_context(), service, formatter)

        update.callback_query.answer.assert_awaited_once_with(messages.NO_ACTIVE_WORKOUT_SHORT)

    @pytest.mark.asyncio
    async def test_unknown_split_button(self, service, formatter):
        service.start(CHAT, "2024-06-01")
        update = make_update(callback_data="split:cardio")

        await handlers.split_selected(update, make_context(), service, formatter)

        assert service.get(CHAT).step == SessionStep.CHOOSE_SPLIT
        update.callback_query.answer.assert_awaited_once_with(messages.UNKNOWN_SPLIT)

    @pytest.mark.asyncio
    async def test_done_button(self, service, workouts, formatter):
        await _start_collecting(service, formatter)
        update = make_update(callback_data=DONE_CALLBACK)

        await handlers.done_selected(update, make_context(), service, formatter, manager_chat_id=None)

        assert len(workouts.list_for(CHAT)) == 1
        update.callback_query.edit_message_reply_markup.assert_awaited_once_with(reply_markup=None)
        update.callback_query.answer.assert_awaited_once_with(messages.WORKOUT_SAVED)

    @pytest.mark.asyncio
    async def test_done_button_without_session(self, service, formatter):
        update = make_update(callback_data=DONE_CALLBACK)

        await handlers.done_selected(update, make_context(), service, formatter, manager_chat_id=None)

        update.callback_query.answer.assert_awaited_once_with(messages.NOTHING_TO_FINISH_SHORT)

    @pytest.mark.asyncio
    async def test_cancel_button(self, service, formatter):
        service.start(CHAT, "2024-06-01")
        update = make_update(callback_data=CANCEL_CALLBACK)

        await handlers.cancel_selected(update, make_context(), service)

        assert service.get(CHAT) is None
        update.callback_query.answer.assert_awaited_once_with(messages.WORKOUT_CANCELLED_SHORT)


def test_handler_factory_registers_every_entry_point(service, formatter, detector):
    registered = handlers.get_workout_handlers(service, formatter, detector)

    commands = {c for h in registered for c in getattr(h, "commands", ())}
    assert commands == {"w", "date", "done", "cancel"}
    assert len(registered) == 8
