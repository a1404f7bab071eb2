"""
ChillGamer core settings provider
"""

import os
import json
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

import pydantic_settings
from pydantic_settings import PydanticBaseSettingsSource

from .schemas import config


SETTINGS_LOG_INFO_FUNCTION: Optional[Callable[[str], Any]] = None
"""
optional function to accept log messages when creating a new configuration file
"""

CONFIG_PATHS: List[str] = ["config.json", os.path.join("..", "config.json")]
"""
list of search paths for the config file, can be overwritten by the env variable ``CONFIG_PATH``
"""

if os.environ.get("CONFIG_PATH"):
    CONFIG_PATHS = [os.environ.get("CONFIG_PATH")]


def get_db_from_env(db_override: Optional[str] = None) -> Optional[str]:
    if db_override:
        return db_override
    return os.environ.get(
        "MONGODB_URI",
        os.environ.get("DATABASE_CONNECTION", os.environ.get("DATABASE__CONNECTION", None))
    )


class ConfigFileSource(PydanticBaseSettingsSource):
    """
    Settings source reading the first JSON config file found in ``CONFIG_PATHS``
    """

    def get_field_value(self, field, field_name: str) -> Tuple[Any, str, bool]:
        return None, field_name, False

    def __call__(self) -> Dict[str, Any]:
        return read_settings_from_file()


class LegacyEnvironmentSource(PydanticBaseSettingsSource):
    """
    Settings source for the flat ``PORT`` and ``MONGODB_URI`` environment variables

    Those two variables are the ones most hosting platforms set for a web
    service with a managed MongoDB deployment, so they take precedence over
    the nested variables like ``SERVER__PORT`` and ``DATABASE__CONNECTION``.
    """

    def get_field_value(self, field, field_name: str) -> Tuple[Any, str, bool]:
        return None, field_name, False

    def __call__(self) -> Dict[str, Any]:
        values = {}
        if os.environ.get("PORT"):
            values["server"] = {"port": os.environ["PORT"]}
        if os.environ.get("MONGODB_URI"):
            values["database"] = {"connection": os.environ["MONGODB_URI"]}
        return values


class Settings(pydantic_settings.BaseSettings, config.CoreConfig):
    """
    ChillGamer core settings

    Do not change most of the settings at runtime, since this might lead to unspecified
    behavior. Always restart the server after changing the config file. But note that
    there are some parts (especially the server config and the database config), which
    might get overwritten during initialization (via command-line arguments) or during
    unit testing (where e.g. the database client will be replaced completely).
    """

    model_config = pydantic_settings.SettingsConfigDict(
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore"
    )

    @classmethod
    def settings_customise_sources(
            cls,
            settings_cls: Type[pydantic_settings.BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,
            file_secret_settings: PydanticBaseSettingsSource
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            LegacyEnvironmentSource(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
            ConfigFileSource(settings_cls)
        )


def store_configuration(conf: Optional[config.CoreConfig] = None, path: Optional[str] = None) -> config.CoreConfig:
    p = path or os.path.abspath(CONFIG_PATHS[0])
    conf = conf or get_default_core_config(get_db_from_env())
    with open(p, "w") as f:
        json.dump(conf.model_dump(), f, indent=4)
    SETTINGS_LOG_INFO_FUNCTION and SETTINGS_LOG_INFO_FUNCTION(f"A new config file has been created as {p!r}.")
    return conf


def read_settings_from_file() -> Dict[str, Any]:
    for path in CONFIG_PATHS:
        if os.path.exists(path):
            with open(path, "r", encoding="UTF-8") as file:
                return json.load(file)
    return {}


def get_default_core_config(database_override: Optional[str] = None) -> config.CoreConfig:
    c = config.CoreConfig()
    if database_override:
        c.database.connection = database_override
    return c


def get_default_config() -> Dict[str, Any]:
    return get_default_core_config().model_dump()
