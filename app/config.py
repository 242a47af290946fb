from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from typing import List, Optional

# Export .env into os.environ as well, for tools that read it directly
load_dotenv()

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./stockroom.db"
    SQL_ECHO: bool = False

    # Application
    APP_NAME: str = "Stockroom Orders"
    APP_VERSION: str = "1.0.0"

    # CORS
    ALLOWED_ORIGINS: List[str] = ["*"]  # Restrict in production

    # Shared PIN gate
    PIN_CODE: str = "0000"
    PIN_CODE_HASH: Optional[str] = None  # passlib hash, wins over PIN_CODE
    REQUIRE_PIN_HEADER: bool = False

    # Orders
    STRICT_STATUS_TRANSITIONS: bool = True
    BUSINESS_TIMEZONE: str = "UTC"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

settings = Settings()
