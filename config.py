import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    APP_NAME = data.get("APP_NAME", "account-service")
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./test.db")
    REDIS_URL = data.get("REDIS_URL", "redis://localhost:6379/0")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Tokens
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    JWT_PREVIOUS_SECRETS = data.get("JWT_PREVIOUS_SECRETS", [])
    JWT_ALGORITHM = data.get("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRY_MINUTES = int(data.get("ACCESS_TOKEN_EXPIRY_MINUTES", 15))
    ACCESS_TOKEN_EXPIRY_EXTENDED_MINUTES = int(
        data.get("ACCESS_TOKEN_EXPIRY_EXTENDED_MINUTES", 60)
    )
    REFRESH_TOKEN_EXPIRY_HOURS = int(data.get("REFRESH_TOKEN_EXPIRY_HOURS", 24))
    REFRESH_TOKEN_EXPIRY_EXTENDED_HOURS = int(
        data.get("REFRESH_TOKEN_EXPIRY_EXTENDED_HOURS", 720)
    )
    TWO_FACTOR_CHALLENGE_EXPIRY_MINUTES = int(
        data.get("TWO_FACTOR_CHALLENGE_EXPIRY_MINUTES", 5)
    )

    # One-time codes
    OTP_CODE_LENGTH = int(data.get("OTP_CODE_LENGTH", 6))
    OTP_EXPIRY_MINUTES = int(data.get("OTP_EXPIRY_MINUTES", 15))

    # Rate limiting
    RATE_LIMIT_PREFIX = data.get("RATE_LIMIT_PREFIX", "auth")
    RATE_LIMIT_REQUESTS = int(data.get("RATE_LIMIT_REQUESTS", 5))
    RATE_LIMIT_PERIOD_SECONDS = int(data.get("RATE_LIMIT_PERIOD_SECONDS", 60))

    # Passwords
    BCRYPT_ROUNDS = int(data.get("BCRYPT_ROUNDS", 12))

    # Notifications
    CELERY_BROKER_URL = data.get("CELERY_BROKER_URL", "redis://localhost:6379/1")
    NOTIFICATION_QUEUE = data.get("NOTIFICATION_QUEUE", "critical")
    NOTIFICATION_MAX_RETRIES = int(data.get("NOTIFICATION_MAX_RETRIES", 3))
