import logging
import os
from typing import Optional, Tuple

from telegram import Update
from telegram.ext import Application

from bot.formatters import WorkoutFormatter
from bot.handlers import get_workout_handlers
from config import Settings
from services.line_parser import WorkoutLineParser
from services.mongo_service import MongoService, MongoSessionRepository, MongoWorkoutRepository
from services.repositories import (
    InMemorySessionRepository,
    InMemoryWorkoutRepository,
    SessionRepository,
    WorkoutRepository,
)
from services.session_service import WorkoutSessionService
from services.split_detector import WorkoutSplitDetector

logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    logging.basicConfig(level=level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_repositories(settings: Settings) -> Tuple[SessionRepository, WorkoutRepository, Optional[MongoService]]:
    """Picks the storage backend named in the settings."""
    if settings.storage.backend == "mongo":
        mongo = MongoService(settings.mongo)
        return MongoSessionRepository(mongo.sessions), MongoWorkoutRepository(mongo.workouts), mongo
    logger.info("Using in-memory storage; sessions and workouts are lost on restart.")
    return InMemorySessionRepository(), InMemoryWorkoutRepository(), None


def main() -> None:
    """Instantiates dependencies based on environment and starts the bot."""

    # --- Environment Selection ---
    env = os.getenv('BOT_ENV', 'local')

    try:
        settings = Settings.load(env)
        setup_logging(settings.logging.level)
        logger.info("Starting bot in '%s' environment.", env)
        sessions, workouts, mongo = build_repositories(settings)
    except FileNotFoundError as e:
        setup_logging("INFO")
        logger.critical("Configuration Error: %s. Ensure your config-%s.yaml file exists.", e, env)
        return
    except Exception:
        setup_logging("INFO")
        logger.critical("Failed to initialize services. Bot cannot start.", exc_info=True)
        return

    service = WorkoutSessionService(sessions, workouts, WorkoutLineParser())
    handlers = get_workout_handlers(
        service, WorkoutFormatter(), WorkoutSplitDetector(), manager_chat_id=settings.bot.manager_chat_id
    )

    # --- Create the Telegram Application ---
    application = Application.builder().token(settings.bot.telegram_token).build()
    for handler in handlers:
        application.add_handler(handler)

    logger.info("Bot is ready and listening for commands.")
    try:
        application.run_polling(allowed_updates=Update.ALL_TYPES)
    finally:
        if mongo is not None:
            mongo.close_connection()


if __name__ == "__main__":
    main()
