import os
import sys

from dotenv import load_dotenv

from enums.runtime_environment import RuntimeEnvironment

# Load .env but don't override existing environment variables
# This allows test runs to set RUNTIME_ENVIRONMENT=TEST before import
load_dotenv(".env", override=False)

try:
    RUNTIME_ENVIRONMENT = RuntimeEnvironment(os.environ.get("RUNTIME_ENVIRONMENT", RuntimeEnvironment.DEV.value))
except ValueError as e:
    valid_values = [env.value for env in RuntimeEnvironment]
    print(f"\n ERROR: Invalid RUNTIME_ENVIRONMENT configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Valid values: {', '.join(valid_values)}", file=sys.stderr)
    print(f"\nAdd to .env: RUNTIME_ENVIRONMENT={valid_values[0]}\n", file=sys.stderr)
    sys.exit(1)

# Web server
WEBAPP_HOST = os.environ.get("WEBAPP_HOST", "0.0.0.0")
WEBAPP_PORT = int(os.environ.get("WEBAPP_PORT")) if os.environ.get("WEBAPP_PORT") else 8000
CORS_ALLOWED_ORIGINS = [
    origin.strip() for origin in os.environ.get("CORS_ALLOWED_ORIGINS", "").split(",") if origin.strip()
]
SECURITY_HEADERS_ENABLED = os.environ.get("SECURITY_HEADERS_ENABLED", "false") == "true"
HSTS_ENABLED = os.environ.get("HSTS_ENABLED", "false") == "true"  # Only behind HTTPS

# Database
DB_NAME = os.environ.get("DB_NAME", "marketplace.db")
DB_URL = os.environ.get("DB_URL")  # Full SQLAlchemy URL, overrides DB_NAME when set

# Storefront
LANGUAGE = os.environ.get("LANGUAGE", "fr")  # fr, en
CURRENCY_SYMBOL = os.environ.get("CURRENCY_SYMBOL", "SLE")
ITEM_UNIT = os.environ.get("ITEM_UNIT", "pcs.")

try:
    PAGE_ENTRIES = int(os.environ.get("PAGE_ENTRIES", "20"))
    if PAGE_ENTRIES <= 0:
        raise ValueError("PAGE_ENTRIES must be positive")
except ValueError as e:
    print(f"\n ERROR: Invalid PAGE_ENTRIES configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Current value: {os.environ.get('PAGE_ENTRIES', '(not set)')}\n", file=sys.stderr)
    sys.exit(1)

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true") == "true"  # Mask sensitive data in logs
LOG_DIR = os.environ.get("LOG_DIR", "logs")

if RUNTIME_ENVIRONMENT == RuntimeEnvironment.PROD:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "30"))
else:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "5"))
