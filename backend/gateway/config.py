import logging
import sys

from pydantic_settings import BaseSettings


def setup_logging():
    """Configure application logging."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # Set third-party loggers to WARNING to reduce noise
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# Initialize logging on import
setup_logging()


class Settings(BaseSettings):
    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # Timeout settings (seconds)
    request_timeout: float = 300.0
    connect_timeout: float = 10.0

    # Maximum time to wait for active streams during shutdown (seconds)
    cleanup_timeout: float = 10.0

    # Name of the broadcast channel carrying stream events
    event_channel: str = "ai-stream"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
