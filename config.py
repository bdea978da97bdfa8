from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Loan Application API"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./loan_applications.db"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Audit actor recorded when the caller does not identify itself
    default_actor: str = "system_user"
    # Upper bound for a single storage operation (create/get/submit/cancel)
    storage_timeout_seconds: float = 10.0

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
