import os
from dotenv import load_dotenv

load_dotenv()

TRUE_VALUES = {"1", "true", "yes", "on"}


def is_truthy(value) -> bool:
    return str(value or "").strip().lower() in TRUE_VALUES


FLASK_HOST = os.environ.get("FLASK_HOST", "localhost")
FLASK_PORT = int(os.environ.get("FLASK_PORT", 5000))
DEBUG = is_truthy(os.environ.get("DEBUG"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
CORS_ALLOW = os.environ.get("CORS_ALLOW", "http://localhost:5001")

DATABASE_PATH = os.environ.get("DATABASE_PATH", "./databases/genealogy.db")

# Seconds a record built by a factory stays in the shared cache
RECORD_CACHE_TTL = int(os.environ.get("RECORD_CACHE_TTL", 300))

# Translations
LOCALE_DIR = os.environ.get("LOCALE_DIR", "./locale")
LANGUAGE = os.environ.get("LANGUAGE", "en")
