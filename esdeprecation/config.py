"""
esdeprecation configuration

We read configuration from 2 sources, in order of precedence (higher is more priority)
- Environment variables
- A .env file, either in the current working directory or in a location specified
  by the ESDEPRECATION_ENV_FILE environment variable
"""

import functools
from enum import Enum
from pathlib import Path
from typing import Annotated

from class_doc import extract_docs_from_cls_obj
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "esdeprecation_"


class LogLevel(str, Enum):
    #: show every check that is run
    debug = "debug"

    #: show progress per index
    info = "info"

    #: only show checks that could not be completed
    warning = "warning"


for field, doc in extract_docs_from_cls_obj(LogLevel).items():
    LogLevel[field].__doc__ = "\n".join(doc)


class Settings(BaseSettings):
    env_file: Annotated[
        Path,
        Field(
            description="Location of a .env file (if used) relative to working directory",
        ),
    ] = Path(".env")

    max_mapping_depth: Annotated[
        int,
        Field(
            description=(
                "Maximum nesting depth of a field mapping that will be analyzed. "
                "Deeper mappings are reported as not fully analyzed"
            ),
            ge=1,
        ),
    ] = 10000

    field_expansion_limit: Annotated[
        int,
        Field(
            description=(
                "Number of fields an index can have before automatic field expansion "
                "(query_string, simple_query_string, multi_match) fails. "
                "Should match indices.query.bool.max_clause_count"
            ),
            ge=1,
        ),
    ] = 1024

    log_level: Annotated[LogLevel, Field(description="Log level of the command line tool")] = LogLevel.info

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX)


@functools.lru_cache()
def get_settings() -> Settings:
    # Settings() only reads the environment, so load the .env file it points to before reading again
    temp = Settings()
    load_dotenv(temp.env_file, override=False)
    return Settings()


if __name__ == "__main__":
    # Echo the settings
    for k, v in get_settings().model_dump().items():
        print(f"{ENV_PREFIX.upper()}{k.upper()}={v}")
