import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./subscriptions.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    API_RELOAD = bool(data.get("API_RELOAD", False))
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    ENABLE_SENTRY = data.get("ENABLE_SENTRY", 0)
    DSN_SENTRY = data.get("DSN_SENTRY", "")
    SENTRY_ENVIRONMENT = data.get("SENTRY_ENVIRONMENT", "dev")

    # Subscription pricing
    SUBSCRIPTION_DISCOUNT_RATE = str(data.get("SUBSCRIPTION_DISCOUNT_RATE", "0.15"))
    ENROLLMENT_REQUIRE_WALLET_BALANCE = bool(data.get("ENROLLMENT_REQUIRE_WALLET_BALANCE", True))
    ORDER_DELIVERY_SLOT = data.get("ORDER_DELIVERY_SLOT", "Daily by 9:00 AM")

    # Billing sweep
    BILLING_SWEEP_ENABLED = bool(data.get("BILLING_SWEEP_ENABLED", True))
    BILLING_SWEEP_HOUR = int(data.get("BILLING_SWEEP_HOUR", 9))  # Local hour of the daily tick
    BILLING_SWEEP_INTERVAL_SECONDS = int(data.get("BILLING_SWEEP_INTERVAL_SECONDS", 300))  # Clock check
    BILLING_SWEEP_CONCURRENCY = int(data.get("BILLING_SWEEP_CONCURRENCY", 1))
    BILLING_FAILURE_POLICY = data.get("BILLING_FAILURE_POLICY", "retry_forever")
    BILLING_MAX_CONSECUTIVE_FAILURES = int(data.get("BILLING_MAX_CONSECUTIVE_FAILURES", 3))
    BILLING_NOTIFICATION_WEBHOOK = data.get("BILLING_NOTIFICATION_WEBHOOK", None)
