"""Default configuration settings"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated, Any

import structlog
from dotenv import load_dotenv
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

# general
BASE_DIR = Path(__file__).resolve(strict=True).parent
local_dotenv_path = BASE_DIR.parent / ".env"

SERVICE_NAME = "firebase-rest"
SERVICE_VERSION = "1.0.0"
DEFAULT_TIMEOUT = 10.0  # seconds


class DatabaseSettings(BaseSettings):
    """
    Realtime Database settings
    """

    url: Annotated[
        str | None,
        Field(
            default=None,
            description="Database URL, e.g. https://<project>.firebaseio.com",
        ),
    ]
    auth_token: Annotated[
        SecretStr | None,
        Field(
            default=None,
            description="Token appended to every request as `auth` parameter",
        ),
    ]
    emulator_host: Annotated[
        str | None,
        Field(
            default=None,
            description="Database emulator host. Do not use if emulator is not running",
        ),
    ]
    timeout: Annotated[
        float,
        Field(default=DEFAULT_TIMEOUT, description="Request timeout in seconds"),
    ]

    model_config = SettingsConfigDict(
        env_prefix="FIREBASE_DATABASE_",
        env_file=local_dotenv_path,
        extra="allow",
    )


db = DatabaseSettings()


class AuthSettings(BaseSettings):
    """
    Firebase Auth settings
    """

    api_key: Annotated[
        str | None, Field(default=None, description="Firebase API key")
    ]
    auth_emulator_host: Annotated[
        str | None,
        Field(
            default=None,
            description="Firebase auth emulator host. Do not use if emulator is not running",
        ),
    ]
    api_url: Annotated[
        str | None, Field(default=None, description="Firebase auth api url")
    ]
    timeout: Annotated[
        float,
        Field(default=DEFAULT_TIMEOUT, description="Request timeout in seconds"),
    ]

    model_config = SettingsConfigDict(
        env_prefix="FIREBASE_", env_file=local_dotenv_path, extra="allow"
    )

    def model_post_init(self, __context: Any) -> None:
        self.api_url = (
            "https://www.googleapis.com/identitytoolkit/v3/relyingparty"
            if not self.auth_emulator_host
            else (
                f"http://{self.auth_emulator_host}"
                "/www.googleapis.com/identitytoolkit/v3/relyingparty"
            )
        )


auth = AuthSettings()


# Logging
class LogSettings(BaseSettings):
    """
    Settings for loggers
    """

    log_level: int = logging.INFO

    model_config = SettingsConfigDict(
        env_prefix="FIREBASE_REST_", env_file=local_dotenv_path, extra="allow"
    )


log = LogSettings()


def setup_logging(level: int | None = None):
    """
    Configures logging using `structlog` on top of `logging`, rendering
    every record as JSON on `stdout`.

    The library never calls this on import: applications embedding the
    client call it once at startup, or configure structlog themselves.

    Args:
        level (int | None, optional): Minimum level to emit. Defaults to
            `log.log_level`.
    """
    timestamper = structlog.processors.TimeStamper(fmt="iso")
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level if level is not None else log.log_level,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            timestamper,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
