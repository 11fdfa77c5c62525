"""
Core configuration and settings for the FastAPI application
"""

import os
from pathlib import Path
from urllib.parse import quote_plus

from dotenv import load_dotenv


def load_environment():
    """
    Load environment files based on ENV variable
    """
    ENV = os.getenv("ENV", "production").lower()

    root = Path(__file__).parent.parent.parent

    if ENV == "development":
        # Development: ONLY use development files, do NOT fallback to production .env
        dev_env_file = root / ".env.development"
        fallback_dev_env = root / "development.env"

        if dev_env_file.exists():
            load_dotenv(dev_env_file, override=True)
            print("Loaded DEVELOPMENT configuration from .env.development")
        elif fallback_dev_env.exists():
            load_dotenv(fallback_dev_env, override=True)
            print("Loaded DEVELOPMENT configuration from development.env")
        else:
            print("WARNING: No development environment file found!")
    else:
        env_file = root / ".env"
        if env_file.exists():
            load_dotenv(env_file, override=False)
            print("Loaded PRODUCTION configuration from .env")


def build_mongodb_uri() -> str:
    """
    MONGODB_URI wins; otherwise build an Atlas URI from DB_USER / DB_PASS,
    falling back to a local server.
    """
    mongo_uri = os.getenv("MONGODB_URI")
    if mongo_uri:
        return mongo_uri

    db_user = os.getenv("DB_USER")
    db_pass = os.getenv("DB_PASS")
    mongo_host = os.getenv("MONGODB_HOST", "localhost:27017")

    if db_user and db_pass:
        scheme = "mongodb+srv" if ".mongodb.net" in mongo_host else "mongodb"
        return (
            f"{scheme}://{quote_plus(db_user)}:{quote_plus(db_pass)}@{mongo_host}/"
            "?retryWrites=true&w=majority"
        )

    return f"mongodb://{mongo_host}/"


def get_app_config():
    """
    Get application configuration based on environment
    """
    # Re-read ENV after loading files
    ENV = os.getenv("ENV", "production").lower()
    is_development = ENV == "development"

    default_origins = (
        "http://localhost:3000,http://localhost:5173,http://127.0.0.1:5173"
        if is_development
        else ""
    )
    cors_origins = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", default_origins).split(",")
        if origin.strip()
    ]

    config = {
        "env": ENV,
        "debug": is_development or os.getenv("DEBUG", "false").lower() == "true",
        "host": os.getenv("HOST", "localhost" if is_development else "0.0.0.0"),
        "port": int(os.getenv("PORT", 5000)),
        "cors_origins": cors_origins or ["*"],
        # MongoDB
        "mongodb_uri": build_mongodb_uri(),
        "mongodb_name": os.getenv("MONGODB_NAME", "bookWorm"),
        "mongodb_timeout_ms": int(os.getenv("MONGODB_TIMEOUT_MS", 10000)),
        # Logging
        "log_level": os.getenv("LOG_LEVEL", "DEBUG" if is_development else "INFO"),
    }

    return config


# Initialize environment on import
load_environment()
APP_CONFIG = get_app_config()
