import os
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()

# Database configuration
POSTGRES_USER = os.getenv("POSTGRES_USER", "postgres")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
POSTGRES_SERVER = os.getenv("POSTGRES_SERVER", "localhost")
POSTGRES_PORT = os.getenv("POSTGRES_PORT", "5432")
POSTGRES_DB = os.getenv("POSTGRES_DB", "portfolio_db")

# DATABASE_URL wins when set (Railway and most hosts provide it directly)
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_SERVER}:{POSTGRES_PORT}/{POSTGRES_DB}",
)
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# Application configuration
APP_ENV = os.getenv("APP_ENV", "development")
DEBUG = APP_ENV == "development"
APP_NAME = "tzvetomir.dev API"
APP_VERSION = "1.1.0"
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3001"))

# API configuration
API_PREFIX = "/api"
MAX_BODY_BYTES = int(os.getenv("MAX_BODY_BYTES", "10240"))

# CORS: comma separated list, e.g. https://tzvetomir.dev,https://www.tzvetomir.dev
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")
    if origin.strip()
]

# Admin authentication
# Generate the hash with: python cli.py hash-password
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD_HASH = os.getenv("ADMIN_PASSWORD_HASH")
JWT_SECRET = os.getenv("JWT_SECRET")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_IN = os.getenv("JWT_EXPIRES_IN", "8h")

# Rate limiting (fixed windows, per client IP)
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() in ("1", "true", "yes")
GENERAL_RATE_LIMIT = os.getenv("GENERAL_RATE_LIMIT", "100/15 minutes")
LOGIN_RATE_LIMIT = os.getenv("LOGIN_RATE_LIMIT", "5/15 minutes")
GUESTBOOK_RATE_LIMIT = os.getenv("GUESTBOOK_RATE_LIMIT", "3/hour")
NEWSLETTER_RATE_LIMIT = os.getenv("NEWSLETTER_RATE_LIMIT", "5/hour")
CONTACT_RATE_LIMIT = os.getenv("CONTACT_RATE_LIMIT", "3/hour")
