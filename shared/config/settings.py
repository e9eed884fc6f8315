import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "info")

# Order numbers are derived for display only: <PREFIX>-<year>-<id>
ORDER_NUMBER_PREFIX = os.getenv("ORDER_NUMBER_PREFIX", "BO")

# Outbound email goes through an HTTP mail API; unset means log-only
EMAIL_API_URL = os.getenv("EMAIL_API_URL", "")
EMAIL_API_KEY = os.getenv("EMAIL_API_KEY", "")
EMAIL_FROM = os.getenv("EMAIL_FROM", "orders@marketplace.local")
EMAIL_TIMEOUT_SECONDS = float(os.getenv("EMAIL_TIMEOUT_SECONDS", "10"))

TRACING_ENABLED = os.getenv("TRACING_ENABLED", "true").lower() == "true"
OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT", "http://localhost:4317")

STATUS_UPDATE_RATE_LIMIT = os.getenv("STATUS_UPDATE_RATE_LIMIT", "30/minute")

# Shown in buyer-facing refund summaries
CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "৳")
