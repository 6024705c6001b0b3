import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file)
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./test.db")
    CREATE_TABLES_ON_STARTUP = bool(data.get("CREATE_TABLES_ON_STARTUP", True))
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")

    # Site the audit trail belongs to
    SITE_URL = data.get("SITE_URL", "http://localhost")
    SITE_TIMEZONE = data.get("SITE_TIMEZONE", "UTC")

    # Who gets tracked, and who can read the log
    ROLES_TO_TRACK = data.get("ROLES_TO_TRACK", ["administrator"])
    ROLES_WITH_ACCESS = data.get("ROLES_WITH_ACCESS", ["administrator"])
    TRACK_ANONYMOUS = bool(data.get("TRACK_ANONYMOUS", False))

    # Coalescing windows, in minutes
    ACTIVITY_BREAK_MINUTES = data.get("ACTIVITY_BREAK_MINUTES", 20)
    MEDIA_REUSE_MINUTES = data.get("MEDIA_REUSE_MINUTES", 5)

    # Log page
    ITEMS_PER_PAGE = data.get("ITEMS_PER_PAGE", 20)
    MAX_PAGE_LENGTH = data.get("MAX_PAGE_LENGTH", 100)
    MAX_OBJECT_NAME_LENGTH = data.get("MAX_OBJECT_NAME_LENGTH", 100)

    # Retention
    KEEP_PERIOD_QUANTITY = data.get("KEEP_PERIOD_QUANTITY", 1)
    KEEP_PERIOD_UNITS = data.get("KEEP_PERIOD_UNITS", "year")

    # Optional IP geolocation service, e.g. "http://ip-api.com/json/{ip}"
    GEOLOCATION_URL = data.get("GEOLOCATION_URL", "")
    GEOLOCATION_TIMEOUT = data.get("GEOLOCATION_TIMEOUT", 2.0)
