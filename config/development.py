import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance"),
}

# Calendar dates and schedule times are interpreted in this zone
SCHOOL_TIMEZONE = os.getenv("SCHOOL_TIMEZONE", "Africa/Nairobi")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# 0 runs login hooks inline; >0 runs them on a background thread pool
ATTENDANCE_HOOK_WORKERS = int(os.getenv("ATTENDANCE_HOOK_WORKERS", "0"))
