import os
from dotenv import load_dotenv

# Load .env (VS Code terminals sometimes don't inject env vars)
load_dotenv()


class Settings:
    """Runtime configuration read from the environment."""

    def __init__(self):
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./hospital_booking.db")
        self.secret_key = os.getenv("SECRET_KEY", "change-me")
        self.token_max_age = int(os.getenv("TOKEN_MAX_AGE", str(7 * 24 * 3600)))
        self.cors_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.currency = os.getenv("CURRENCY", "VND")
        self.max_reschedules = int(os.getenv("MAX_RESCHEDULES", "2"))
        self.momo_redirect_base = os.getenv("MOMO_REDIRECT_BASE", "https://test-payment.momo.vn/pay")


settings = Settings()
