"""
Application settings.

Values are read once from the environment (and an optional ``.env`` file).
Settings that operators tune at runtime, such as the restock multiplier,
can also be stored in the ``app_config`` table, which takes precedence.
"""

import os
from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Database connection settings
POSTGRES_USER = os.getenv("POSTGRES_USER", "postgres")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
POSTGRES_SERVER = os.getenv("POSTGRES_SERVER", "localhost")
POSTGRES_PORT = os.getenv("POSTGRES_PORT", "5432")
POSTGRES_DB = os.getenv("POSTGRES_DB", "wholesale_db")

# DATABASE_URL wins over the POSTGRES_* settings (used by tests and local sqlite runs)
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+psycopg2://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_SERVER}:{POSTGRES_PORT}/{POSTGRES_DB}",
)

# Auth
JWT_SECRET = os.getenv("JWT_SECRET", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

# HTTP
CORS_ALLOWED_ORIGINS = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:3000,http://127.0.0.1:3000"
)

# Misc
APP_TIMEZONE = os.getenv("APP_TIMEZONE", "UTC")
LOG_DIR = os.getenv("LOG_DIR", "logs")

# Inventory policy
LOW_STOCK_DEFAULT = Decimal(os.getenv("LOW_STOCK_DEFAULT", "20"))
RESTOCK_TARGET_MULTIPLIER = Decimal(os.getenv("RESTOCK_TARGET_MULTIPLIER", "2"))
ENFORCE_CUSTOMER_INVENTORY_ALLOWLIST = _env_flag("ENFORCE_CUSTOMER_INVENTORY_ALLOWLIST")

# Scheduled restock check
RESTOCK_SCHEDULER_ENABLED = _env_flag("RESTOCK_SCHEDULER_ENABLED")
RESTOCK_CRON_HOUR = int(os.getenv("RESTOCK_CRON_HOUR", "6"))
