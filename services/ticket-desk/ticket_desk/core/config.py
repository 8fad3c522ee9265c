from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "Ticket Desk API"
    DATABASE_URL: str = "sqlite:///./ticket_desk.db"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    # "sql" keeps the ticket blob in DATABASE_URL, "memory" keeps it in-process
    STORAGE_BACKEND: str = "sql"
    STORAGE_KEY: str = "tickets.v1"
    SEED_ON_STARTUP: bool = True
    RECENT_TICKETS_LIMIT: int = 5

    class Config:
        env_file = ".env"

settings = Settings()
