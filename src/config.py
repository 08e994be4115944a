"""Application configuration loaded from environment variables and .env file."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.rules import GameRules


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DATABASE_URL: str = "sqlite:///./dev.db"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Content and save slot
    CONTENT_DIR: str = "src/data"
    SAVE_SLOT: str = "default"
    SAVE_BACKEND: str = "sql"  # "sql" | "file"
    SAVE_DIR: str = "saves"

    # Gameplay rules
    QUESTION_TIME_LIMIT: float = 30.0
    TICK_INTERVAL: float = 1.0
    AUTOSAVE_INTERVAL: float = 30.0
    SKIP_PENALTY: int = 10
    MAX_TIME_BONUS: int = 50
    ALLOW_NEGATIVE_SCORE: bool = True
    RNG_SEED: Optional[int] = None

    def game_rules(self) -> GameRules:
        """Build the core rule set from the configured values."""
        return GameRules(
            question_time_limit=self.QUESTION_TIME_LIMIT,
            max_time_bonus=self.MAX_TIME_BONUS,
            skip_penalty=self.SKIP_PENALTY,
            allow_negative_score=self.ALLOW_NEGATIVE_SCORE,
            autosave_interval=self.AUTOSAVE_INTERVAL,
        )


settings = Settings()
