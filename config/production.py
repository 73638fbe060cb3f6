import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance"),
    "connection_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "10")),
}

SCHOOL_TIMEZONE = os.getenv("SCHOOL_TIMEZONE", "Africa/Nairobi")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
ATTENDANCE_HOOK_WORKERS = int(os.getenv("ATTENDANCE_HOOK_WORKERS", "4"))
