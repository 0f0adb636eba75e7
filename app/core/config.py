from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "Wedding Planner Bookings"
    API_PREFIX: str = ""

    # Server
    PORT: int = 8000
    ENVIRONMENT: str = "development"

    # REST backend
    BACKEND_URL: str = ""
    REQUEST_TIMEOUT: float = 5.0

    # Persisted session (dashboard)
    SESSION_FILE: str = "data/session.json"

    # Logging
    LOG_LEVEL: str = "INFO"
    ERROR_LOG_PATH: str = "logs/errors.log"

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
