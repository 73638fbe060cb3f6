"""Using the service layer directly (no Flask).

Controllers are thin; the attendance rules live in the services wired by
``build_container``.
"""

import importlib
import json
from datetime import timedelta

from config import get_settings_module

from src.school_attendance.school_attendance.common.datetime_utils import now_local
from src.school_attendance.school_attendance.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, timezone=settings.SCHOOL_TIMEZONE)

    now = now_local(container.school_tz)
    container.login_hook.on_login(1, now)

    register = container.register_service.build_register(class_id=1, start_date=now.date() - timedelta(days=28))
    print(json.dumps(register.to_dict(), indent=2))


if __name__ == "__main__":
    main()
