import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


def _env_list(name: str, default: str):
    return [v.strip() for v in os.getenv(name, default).split(",") if v.strip()]


class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to the app as smashlabs.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "smashlabs.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # CORS allow-list for the public website
    CORS_ALLOWED_ORIGINS = _env_list(
        "CORS_ALLOWED_ORIGINS",
        "https://smashlabs.in,http://localhost:3000,http://localhost:3001",
    )

    # Simple IP rate limit for public submissions
    SUBMIT_RATE_WINDOW_SECONDS = int(os.getenv("SUBMIT_RATE_WINDOW_SECONDS", "900"))
    SUBMIT_RATE_MAX_REQUESTS = int(os.getenv("SUBMIT_RATE_MAX_REQUESTS", "100"))

    # Lifecycle policy
    # 0 keeps the historical behaviour: a reference-code collision is reported, not retried
    REFERENCE_CODE_RETRIES = int(os.getenv("REFERENCE_CODE_RETRIES", "0"))
    # False keeps the historical behaviour: cancelled/completed can be left again
    STRICT_TRANSITIONS = os.getenv("STRICT_TRANSITIONS", "false").lower() == "true"

    # Email (SMTP)
    MAIL_ENABLED = os.getenv("MAIL_ENABLED", "true").lower() == "true"
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_FROM_EMAIL = os.getenv("SMTP_FROM_EMAIL")
    SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"
    SMTP_TIMEOUT_SECONDS = int(os.getenv("SMTP_TIMEOUT_SECONDS", "10"))

    # Where new booking / contact alerts go
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")

    # Basic app settings
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    DEBUG = os.getenv("FLASK_DEBUG", "false").lower() == "true"


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    MAIL_ENABLED = False
    ADMIN_EMAIL = "admin@smashlabs.test"
    SUBMIT_RATE_MAX_REQUESTS = 1000
    REFERENCE_CODE_RETRIES = 0
    STRICT_TRANSITIONS = False
