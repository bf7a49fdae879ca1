from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Storage
    database_path: str = "note_builder.db"
    sessions_root: str = "sessions"

    # Logging
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
