import os
import logging

from utils.env import get_env_str, get_env_bool
from utils.redaction import redact_database_url

logger = logging.getLogger(__name__)

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

# -----------------------------------------------------------------------------
# Dotenv loading (LOCAL ONLY)
# -----------------------------------------------------------------------------
# Tests must not pick up a developer's repo-root .env.
_FLASK_ENV_EARLY = (os.getenv("FLASK_ENV") or "").strip().lower()

if _FLASK_ENV_EARLY not in {"test", "testing"}:
    try:
        from dotenv import load_dotenv
        load_dotenv(dotenv_path=os.path.join(BASE_DIR, ".env"), override=False)
    except ImportError:
        logger.warning("[Config] python-dotenv not installed; skipping .env")

# -----------------------------------------------------------------------------
# Environment / Stage
# -----------------------------------------------------------------------------
def _normalize_stage(raw: str) -> str:
    raw = (raw or "").strip().lower()
    if raw in {"prod", "production"}:
        return "production"
    if raw in {"stage", "staging"}:
        return "staging"
    if raw in {"test", "testing"}:
        return "test"
    return "dev"


FLASK_ENV = (os.getenv("FLASK_ENV", "development") or "development").strip().lower()
APP_STAGE = _normalize_stage(os.getenv("APP_STAGE", "dev"))

IS_TEST = APP_STAGE == "test" or FLASK_ENV in {"test", "testing"}
IS_STAGING = APP_STAGE == "staging"
IS_PRODUCTION = APP_STAGE == "production"
IS_SECURE_ENV = IS_STAGING or IS_PRODUCTION

# -----------------------------------------------------------------------------
# Database (Postgres-only)
# -----------------------------------------------------------------------------
DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL environment variable is required.")

# Heroku/Railway style postgres:// -> postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)
    os.environ["DATABASE_URL"] = DATABASE_URL

if not DATABASE_URL.startswith("postgresql://"):
    raise ValueError(
        "CRITICAL: DATABASE_URL must be a PostgreSQL URL (postgresql://...). "
        f"Got: {redact_database_url(DATABASE_URL)}"
    )

# -----------------------------------------------------------------------------
# Shopify App
# -----------------------------------------------------------------------------
def _strip_trailing_slash(url: str) -> str:
    return url[:-1] if url.endswith("/") else url


SHOPIFY_API_KEY = get_env_str("SHOPIFY_API_KEY", default="")
SHOPIFY_API_SECRET = get_env_str("SHOPIFY_API_SECRET", default="")
SHOPIFY_APP_URL = _strip_trailing_slash(get_env_str("SHOPIFY_APP_URL", default="http://localhost:5000"))
SHOPIFY_API_VERSION = get_env_str("SHOPIFY_API_VERSION", default="2024-07")
SCOPES = get_env_str("SCOPES", default="write_products")

if IS_SECURE_ENV:
    if not SHOPIFY_API_KEY or not SHOPIFY_API_SECRET:
        raise ValueError(f"SHOPIFY_API_KEY and SHOPIFY_API_SECRET must be set in {APP_STAGE} environment.")

    # Scan URLs are baked into printed QR codes; they must never point at localhost.
    if not SHOPIFY_APP_URL.lower().startswith("https://"):
        raise RuntimeError(f"CRITICAL: SHOPIFY_APP_URL must be HTTPS in {APP_STAGE} stage. Got: {SHOPIFY_APP_URL}")
    for forbidden in ("localhost", "127.0.0.1"):
        if forbidden in SHOPIFY_APP_URL.lower():
            raise RuntimeError(
                f"CRITICAL: SHOPIFY_APP_URL contains forbidden string '{forbidden}' in {APP_STAGE} stage."
            )
elif not SHOPIFY_API_SECRET:
    SHOPIFY_API_SECRET = "dev-shopify-secret"
    logger.warning("[Config] WARNING: Using default SHOPIFY_API_SECRET for development.")

# -----------------------------------------------------------------------------
# Secrets
# -----------------------------------------------------------------------------
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    if IS_SECURE_ENV:
        raise ValueError(f"SECRET_KEY must be set in {APP_STAGE} environment.")
    SECRET_KEY = "dev-secret-key-change-this"
    logger.warning("[Config] WARNING: Using default SECRET_KEY for development. DO NOT use in real environments!")

# -----------------------------------------------------------------------------
# Proxy / Cookie Security
# -----------------------------------------------------------------------------
TRUST_PROXY_HEADERS = get_env_bool("TRUST_PROXY_HEADERS", default=False)
PROXY_FIX_NUM_PROXIES = int(os.environ.get("PROXY_FIX_NUM_PROXIES", "1"))

# Embedded admin runs inside the Shopify admin iframe.
SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_SAMESITE = "None" if IS_SECURE_ENV else "Lax"
SESSION_COOKIE_SECURE = IS_SECURE_ENV
PREFERRED_URL_SCHEME = "https" if IS_SECURE_ENV else "http"

# -----------------------------------------------------------------------------
# Rate limits
# -----------------------------------------------------------------------------
SCAN_RATE_LIMIT = get_env_str("SCAN_RATE_LIMIT", default="30 per minute")
RATELIMIT_STORAGE_URI = get_env_str("RATELIMIT_STORAGE_URI", default="memory://")
