import logging
import sys
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chaser.services.game.engine import codec

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CHASER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Listeners
    HOST: str = "0.0.0.0"
    HOT_PORT: int = 2009
    COOL_PORT: int = 2010

    # Deadlines (seconds)
    ACCEPT_TIMEOUT: float = 60.0
    RECEIVE_TIMEOUT: float = 10.0

    # Replay dump
    DUMP_ENABLED: bool = True
    DUMP_PATH: str = "./chaser.dump"

    # Names on these ports arrive in a legacy Japanese encoding
    LEGACY_NAME_PORTS: list[int] = list(codec.LEGACY_NAME_PORTS)
    LEGACY_NAME_ENCODING: str = codec.LEGACY_NAME_ENCODING

    DEBUG: bool = False

    @field_validator("HOT_PORT", "COOL_PORT")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 0 <= v <= 65535:
            raise ValueError("port must be between 0 and 65535")
        return v

    @field_validator("ACCEPT_TIMEOUT", "RECEIVE_TIMEOUT")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be positive")
        return v

    def name_encoding_for(self, port: int) -> str:
        """Text encoding a client on ``port`` uses for its name line."""
        if port in self.LEGACY_NAME_PORTS:
            return self.LEGACY_NAME_ENCODING
        return "utf-8"


def configure_logging(debug: bool = False) -> None:
    """Configure logging for the application."""
    log_level = logging.DEBUG if debug else logging.INFO
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # asyncio logs every unclosed transport at DEBUG
    logging.getLogger("asyncio").setLevel(logging.WARNING)


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    configure_logging(settings.DEBUG)
    logger.info("Settings loaded successfully")
    logger.debug("Hot port: %d, Cool port: %d", settings.HOT_PORT, settings.COOL_PORT)
    logger.debug(
        "Accept timeout: %.1fs, receive timeout: %.1fs",
        settings.ACCEPT_TIMEOUT,
        settings.RECEIVE_TIMEOUT,
    )
    return settings
