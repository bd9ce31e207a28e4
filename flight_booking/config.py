from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./flight_booking.db"
    DATABASE_ECHO: bool = False
    SQLITE_TIMEOUT_SECONDS: int = 30

    # Application
    PROJECT_NAME: str = "Flight Booking System"
    API_V1_STR: str = "/api"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Booking
    BOOKING_ID_LENGTH: int = 10
    DEFAULT_PAYMENT_METHOD: str = "momo"
    CHECKED_LUGGAGE_KG: int = 23

    # Promotions
    PROMO_SWEEP_INTERVAL_SECONDS: int = 3600
    PROMO_DOUBLE_COUNT: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
