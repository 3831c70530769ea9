from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, computed_field, model_validator


class MongoConfig(BaseModel):
    database: str
    sessions_collection: str = "sessions"
    workouts_collection: str = "workouts"
    host: str = "localhost"
    port: int = 27017
    user: str = ""
    password: str = ""

    @computed_field
    @property
    def uri(self) -> str:
        """Constructs the MongoDB connection URI from components."""
        if self.user and self.password:
            return f"mongodb://{self.user}:{self.password}@{self.host}:{self.port}/"
        return f"mongodb://{self.host}:{self.port}/"


class BotConfig(BaseModel):
    telegram_token: str
    # Finished workouts are also sent here when set.
    manager_chat_id: Optional[int] = None


class StorageConfig(BaseModel):
    backend: Literal["memory", "mongo"] = "memory"


class LoggingConfig(BaseModel):
    level: str = "INFO"


class Settings(BaseModel):
    bot: BotConfig
    storage: StorageConfig = StorageConfig()
    mongo: Optional[MongoConfig] = None
    logging: LoggingConfig = LoggingConfig()

    @model_validator(mode="after")
    def _mongo_required_for_mongo_backend(self) -> "Settings":
        if self.storage.backend == "mongo" and self.mongo is None:
            raise ValueError("storage.backend is 'mongo' but no 'mongo' section is configured")
        return self

    @classmethod
    def load(cls, environment: str, directory: Path = Path(".")) -> "Settings":
        """Load all configuration from a YAML file for the given environment."""
        path = directory / f"config-{environment}.yaml"
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)
