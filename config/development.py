import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "desk_booking"),
}

DEBUG = True

# If enabled, the app applies database/schema.sql on startup (CREATE TABLE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also upsert the demo users, room and office
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

SESSION_HOURS = int(os.getenv("SESSION_HOURS", "8"))
CORS_ALLOW_ORIGIN = os.getenv("CORS_ALLOW_ORIGIN", "*")
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
