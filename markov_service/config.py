"""
Markov Service Configuration
"""

from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ===== Service =====
    SERVICE_NAME: str = Field(default="markov-chain-service", env="SERVICE_NAME")  # type: ignore
    SERVICE_VERSION: str = Field(default="1.0.0", env="SERVICE_VERSION")  # type: ignore
    HOST: str = Field(default="0.0.0.0", env="HOST")  # type: ignore
    PORT: int = Field(default=8000, env="PORT")  # type: ignore
    LOG_LEVEL: str = Field(default="info", env="LOG_LEVEL")  # type: ignore
    DEBUG: bool = Field(default=False, env="DEBUG")  # type: ignore

    # ===== CORS =====
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"], env="CORS_ORIGINS"  # type: ignore
    )

    # ===== Corpus =====
    # Records with fewer tokens never reach the model
    MIN_CHAIN_TOKENS: int = Field(default=5, env="MIN_CHAIN_TOKENS")  # type: ignore

    # ===== Generation / Export =====
    # 0 disables the cap
    GENERATE_MAX_STEPS: int = Field(default=0, env="GENERATE_MAX_STEPS")  # type: ignore
    DOT_OUTPUT_PATH: str = Field(default="markov.dot", env="DOT_OUTPUT_PATH")  # type: ignore
    OUTPUT_SEPARATOR: str = Field(default="-------------------", env="OUTPUT_SEPARATOR")  # type: ignore

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()


def max_steps_or_none(value: int) -> Optional[int]:
    """Map the 0-means-unbounded setting to the generator's argument."""
    return value if value and value > 0 else None
