import logging
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import ConnectionFailure, PyMongoError

from config import MongoConfig
from models.domain import Workout, WorkoutSession
from services.repositories import SessionRepository, WorkoutRepository

logger = logging.getLogger(__name__)


class MongoService:
    """Owns the MongoDB connection and the bot's collections."""

    def __init__(self, config: MongoConfig) -> None:
        """Initialize MongoDB client and collections."""
        self.config = config
        try:
            self.client: MongoClient = MongoClient(config.uri, serverSelectionTimeoutMS=5000)
            self.client.admin.command("ping")  # Quick connection check
            self.db = self.client[config.database]
            self.sessions: Collection = self.db[config.sessions_collection]
            self.workouts: Collection = self.db[config.workouts_collection]
            self.workouts.create_index([("chat_id", ASCENDING)])
            logger.info("Connected to MongoDB at %s", config.host)
        except ConnectionFailure as exc:
            logger.critical("Could not connect to MongoDB.", exc_info=True)
            raise exc

    def close_connection(self) -> None:
        """Closes the MongoDB connection."""
        self.client.close()
        logger.info("MongoDB connection closed.")


class MongoSessionRepository(SessionRepository):
    """One document per chat; saves replace the whole document."""

    def __init__(self, collection: Collection) -> None:
        self.collection = collection

    def get(self, chat_id: int) -> Optional[WorkoutSession]:
        doc = self.collection.find_one({"_id": chat_id})
        if doc is None:
            return None
        doc.pop("_id", None)
        return WorkoutSession.model_validate(doc)

    def save(self, chat_id: int, session: WorkoutSession) -> None:
        document: Dict[str, Any] = {"_id": chat_id, **session.model_dump(mode="json")}
        try:
            self.collection.replace_one({"_id": chat_id}, document, upsert=True)
        except PyMongoError as exc:
            logger.error("Failed to save session for chat %s: %s", chat_id, exc, exc_info=True)
            raise
        logger.debug("Saved session for chat %s: %s", chat_id, document)

    def remove(self, chat_id: int) -> None:
        try:
            self.collection.delete_one({"_id": chat_id})
        except PyMongoError as exc:
            logger.error("Failed to remove session for chat %s: %s", chat_id, exc, exc_info=True)
            raise


class MongoWorkoutRepository(WorkoutRepository):
    """Inserts one document per finished workout, tagged with the chat id."""

    def __init__(self, collection: Collection) -> None:
        self.collection = collection

    def save(self, chat_id: int, workout: Workout) -> None:
        document: Dict[str, Any] = {"chat_id": chat_id, **workout.model_dump(mode="json")}
        try:
            result = self.collection.insert_one(document)
        except PyMongoError as exc:
            logger.error("Failed to save workout for chat %s: %s", chat_id, exc, exc_info=True)
            raise
        logger.info("Workout saved for chat %s with id: %s", chat_id, result.inserted_id)

    def list_for(self, chat_id: int) -> List[Workout]:
        cursor = self.collection.find({"chat_id": chat_id}, {"_id": 0, "chat_id": 0}).sort("_id", ASCENDING)
        return [Workout.model_validate(doc) for doc in cursor]
