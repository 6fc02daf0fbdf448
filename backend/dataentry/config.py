"""Application configuration loaded from environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings

PACKAGE_DIR = Path(__file__).parent


class Settings(BaseSettings):
    # App
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Stage catalog
    STAGE_DATA_DIR: Path = PACKAGE_DIR / "data" / "stages"

    # Stage flow
    SUBMIT_DISPLAY_DELAY_SECONDS: float = 1.5  # pause so the player can read the stage result
    TIMEOUT_DISPLAY_DELAY_SECONDS: float = 2.0
    TIME_BONUS_DIVISOR: int = 5  # one bonus point per N seconds left on the clock

    # Sessions
    SESSION_LIMIT: int = 1000  # max play sessions held in memory

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
