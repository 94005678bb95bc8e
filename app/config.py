import os
import secrets

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./civiccare.db")
FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:5173")
IS_PRODUCTION = os.environ.get("PRODUCTION", "").lower() in ("1", "true", "yes")

CORS_ORIGINS = [
    FRONTEND_URL,
]

ACCESS_TOKEN_EXPIRE_TIME = int(os.environ.get("ACCESS_TOKEN_EXPIRE_TIME", 60)) # in minutes

### Hashing
SECRET_KEY = os.environ.get("SECRET_KEY") or secrets.token_hex(32) # `openssl rand -hex 32`
ENCRYPTION_ALGORITHM = "HS256"

### Identity provider
FIREBASE_SERVICE_ACCOUNT = os.environ.get("FIREBASE_SERVICE_ACCOUNT") # base64 encoded service account json

### Admin
ADMIN_SETUP_SECRET = os.environ.get("ADMIN_SETUP_SECRET", "").strip()
ADMIN_LOGIN = os.environ.get("ADMIN_LOGIN")
ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD")

### Business rules
FREE_ISSUE_LIMIT = 3
PREMIUM_PRICE = 1000
DEFAULT_PAYMENT_METHOD = "assignment"
