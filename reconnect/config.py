import os
import logging
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _database_url():
    # Prefer discrete DB_* variables, fall back to DATABASE_URL, then a local file
    db_host = os.getenv("DB_HOST")
    db_port = os.getenv("DB_PORT", "3306")
    db_user = os.getenv("DB_USER")
    db_password = os.getenv("DB_PASSWORD", "")
    db_name = os.getenv("DB_NAME")

    if db_host and db_user and db_name:
        return f"mysql+pymysql://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"

    url = os.getenv("DATABASE_URL")
    if url:
        return url

    logger.warning("No database configured, using local SQLite file reconnect.db")
    return "sqlite:///reconnect.db"


DATABASE_URL = _database_url()
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", 10))

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 5000))

# Media store
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
MEDIA_BACKEND = os.getenv("MEDIA_BACKEND", "local")  # local/s3
MAX_UPLOAD_SIZE_MB = int(os.getenv("MAX_UPLOAD_SIZE_MB", 10))
MAX_UPLOAD_BYTES = MAX_UPLOAD_SIZE_MB * 1024 * 1024

R2_BUCKET = os.getenv("R2_BUCKET")
S3_ENDPOINT_URL = os.getenv("S3_ENDPOINT_URL")
if not S3_ENDPOINT_URL and os.getenv("CLOUDFLARE_ACCOUNT_ID"):
    S3_ENDPOINT_URL = f"https://{os.getenv('CLOUDFLARE_ACCOUNT_ID')}.r2.cloudflarestorage.com"

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Client side
API_BASE_URL = os.getenv("API_BASE_URL", f"http://localhost:{PORT}")
