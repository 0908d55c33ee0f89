import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
BASE_URL = os.getenv("BASE_URL", "")
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
IMAGES_DIR = os.getenv("IMAGES_DIR", os.path.join(ROOT_DIR, "public", "images"))
CATALOG_PATH = os.getenv("CATALOG_PATH", "")
ALIASES_PATH = os.getenv("ALIASES_PATH", "")
MIN_SUBSTRING_LENGTH = int(os.getenv("MIN_SUBSTRING_LENGTH", "6"))
MAX_EDIT_DISTANCE = int(os.getenv("MAX_EDIT_DISTANCE", "2"))
SUGGEST_THRESHOLD = float(os.getenv("SUGGEST_THRESHOLD", "60"))
BODY_LIMIT = int(os.getenv("BODY_LIMIT", str(1024 * 1024)))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = os.getenv("LOG_DIR", "data")
