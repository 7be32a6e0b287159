from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Shared secret for service-to-service routes. Left unset, those routes fail closed.
    tpa_api_bearer_token: str | None = None
    database_path: Path = Path("data/classroom.db")
    log_level: str = "INFO"

    class Config:
        env_file = ".env"


settings = Settings()
