# File: houselook/core/config.py
# Simple env-driven settings, no env file parsing

import os
from typing import List, Optional

# Default values
DEFAULT_STORE_BACKEND = "firebase"
DEFAULT_FIREBASE_DATABASE_URL = "https://houselook-fd529-default-rtdb.firebaseio.com"
DEFAULT_SAVED_TTL_HOURS = 24
DEFAULT_DASHBOARD_REFRESH_SECONDS = 300  # 5 minutes
DEFAULT_MPESA_BASE_URL = "http://localhost:3005"
DEFAULT_MOCK_MPESA_PORT = 3005
DEFAULT_SIGNUP_POINTS = 100

class Settings:
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "HouseLook API"

    # Record store settings
    STORE_BACKEND: str = os.getenv("STORE_BACKEND", DEFAULT_STORE_BACKEND)  # firebase, memory
    FIREBASE_DATABASE_URL: str = os.getenv("FIREBASE_DATABASE_URL", DEFAULT_FIREBASE_DATABASE_URL)
    # Path to a service account JSON file; application default credentials when unset
    FIREBASE_CREDENTIALS: Optional[str] = os.getenv("FIREBASE_CREDENTIALS")

    # Saved houses
    SAVED_TTL_HOURS: int = int(os.getenv("SAVED_TTL_HOURS", DEFAULT_SAVED_TTL_HOURS))

    # Admin dashboard
    DASHBOARD_REFRESH_SECONDS: int = int(os.getenv("DASHBOARD_REFRESH_SECONDS", DEFAULT_DASHBOARD_REFRESH_SECONDS))
    ACTIVE_SESSION_MINUTES: int = int(os.getenv("ACTIVE_SESSION_MINUTES", "30"))
    ACTIVE_USER_DAYS: int = int(os.getenv("ACTIVE_USER_DAYS", "30"))

    # New accounts
    SIGNUP_POINTS: int = int(os.getenv("SIGNUP_POINTS", DEFAULT_SIGNUP_POINTS))

    # CORS settings - hardcoded for now to avoid parsing issues
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # M-Pesa settings
    MPESA_BASE_URL: str = os.getenv("MPESA_BASE_URL", DEFAULT_MPESA_BASE_URL)
    MPESA_CONSUMER_KEY: Optional[str] = os.getenv("MPESA_CONSUMER_KEY")
    MPESA_CONSUMER_SECRET: Optional[str] = os.getenv("MPESA_CONSUMER_SECRET")
    MPESA_SHORTCODE: str = os.getenv("MPESA_SHORTCODE", "174379")
    MPESA_PASSKEY: str = os.getenv("MPESA_PASSKEY", "")
    MPESA_CALLBACK_URL: str = os.getenv("MPESA_CALLBACK_URL", f"{DEFAULT_MPESA_BASE_URL}/callback")
    MPESA_TIMEOUT: int = int(os.getenv("MPESA_TIMEOUT", "10"))
    MOCK_MPESA_PORT: int = int(os.getenv("PORT", DEFAULT_MOCK_MPESA_PORT))

# Create settings instance
settings = Settings()
