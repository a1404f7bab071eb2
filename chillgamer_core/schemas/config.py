"""
Special schemas for the configuration file and its properties
"""

from typing import Dict, List, Optional, Union

import pydantic


class GeneralConfig(pydantic.BaseModel):
    page_size: pydantic.PositiveInt = 6
    listing_limit: pydantic.PositiveInt = 5
    high_ratings: List[str] = ["9", "10"]
    top_ratings: List[str] = ["10"]
    review_unique_fields: List[str] = ["title", "reviewerEmail"]
    watchlist_unique_fields: List[str] = ["visitor", "watchId"]


class ServerConfig(pydantic.BaseModel):
    host: str = "127.0.0.1"
    port: pydantic.conint(gt=0, lt=65536) = 5000
    cors_origins: List[str] = ["*"]


class DatabaseConfig(pydantic.BaseModel):
    connection: str = "mongodb://localhost:27017"
    name: pydantic.constr(min_length=1) = "ChillGamerDB"
    server_api: Optional[str] = "1"
    selection_timeout_ms: pydantic.PositiveInt = 30000
    reviews: pydantic.constr(min_length=1) = "ReviewCollection"
    watchlist: pydantic.constr(min_length=1) = "WatchListCollection"


class LoggingConfig(pydantic.BaseModel):
    version: pydantic.conint(ge=1, le=1) = 1
    disable_existing_loggers: bool = False
    incremental: bool = False
    filters: Dict[str, Dict[str, Union[str, list]]] = {
        "pymongo_no_debug": {
            "()": "chillgamer_core.misc.logger.NoDebugFilter",
            "name": "pymongo"
        }
    }
    formatters: Dict[str, Dict[str, str]] = {
        "default": {
            "style": "{",
            "format": "{asctime}: ChillGamer {process}: [{levelname}] {name}: {message}",
            "datefmt": "%d.%m.%Y %H:%M:%S"
        },
        "file": {
            "style": "{",
            "format": "{asctime} ({process}): [{levelname}] {name}: {message}",
            "datefmt": "%d.%m.%Y %H:%M"
        },
        "access": {
            "()": "uvicorn.logging.AccessFormatter",
            "fmt": "%(asctime)s %(client_addr)s - \"%(request_line)s\" %(status_code)s"
        }
    }
    loggers: Dict[str, dict] = {
        "uvicorn.access": {
            "level": "INFO",
            "handlers": ["access"],
            "propagate": False
        }
    }
    handlers: Dict[str, Dict[str, Union[str, list]]] = {
        "default": {
            "level": "INFO",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
            "formatter": "default",
            "filters": ["pymongo_no_debug"]
        },
        "file": {
            "level": "DEBUG",
            "class": "logging.FileHandler",
            "filename": "./chillgamer.log",
            "formatter": "file",
            "filters": ["pymongo_no_debug"]
        },
        "access": {
            "level": "INFO",
            "class": "logging.FileHandler",
            "filename": "./access.log",
            "formatter": "access"
        }
    }
    root: dict = {
        "level": "INFO",
        "handlers": ["default", "file"]
    }


class CoreConfig(pydantic.BaseModel):
    general: GeneralConfig = pydantic.Field(default_factory=GeneralConfig)
    server: ServerConfig = pydantic.Field(default_factory=ServerConfig)
    database: DatabaseConfig = pydantic.Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = pydantic.Field(default_factory=LoggingConfig)

    @pydantic.field_validator("general")
    @classmethod
    def enforce_rating_tiers(cls, value: GeneralConfig) -> GeneralConfig:
        if not value.high_ratings or not value.top_ratings:
            raise ValueError("Rating tiers must not be empty")
        return value
