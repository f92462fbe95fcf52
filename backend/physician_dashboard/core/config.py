from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    APP_NAME: str = "Physician Dashboard"
    VERSION: str = "1.0.0"

    # Storage backend: "memory", "file" or "sql"
    STORAGE_BACKEND: str = "sql"
    STORAGE_DIR: str = "./physician_dashboard_data"
    DATABASE_URL: str = "sqlite:///./physician_dashboard.db"

    # Namespaced keys in the key-value store
    STORAGE_KEY_PATIENTS: str = "physician_dashboard_patients"
    STORAGE_KEY_EXAMINATIONS: str = "physician_dashboard_examinations"
    STORAGE_KEY_FILES: str = "physician_dashboard_files"
    STORAGE_KEY_USERS: str = "physician_dashboard_users"
    STORAGE_KEY_LAST_SAVE: str = "lastSaveTime"

    # Used as uploadedBy when nobody is signed in
    DEFAULT_ACTOR_NAME: str = "Dr. John Smith, MD"

    # Dashboard aggregation
    MAX_RECENT_ACTIVITY: int = 5
    TOP_DIAGNOSES_LIMIT: int = 5
    TREND_WINDOW_DAYS: int = 7
    FOLLOW_UP_MONTHS: int = 6

    # Auth boundary
    MAX_LOGIN_ATTEMPTS: int = 5
    LOCKOUT_MINUTES: int = 15
    SESSION_HOURS: int = 24
    REMEMBER_ME_DAYS: int = 30
    DEMO_USER_EMAIL: Optional[str] = None
    DEMO_USER_PASSWORD: Optional[str] = None

    class Config:
        env_file = ".env"


settings = Settings()
