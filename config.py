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
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./fiscal.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    ENABLE_SENTRY = data.get("ENABLE_SENTRY", 0)
    DSN_SENTRY = data.get("DSN_SENTRY", "")
    SENTRY_ENVIRONMENT = data.get("SENTRY_ENVIRONMENT", "dev")

    # Issuer identity, encoded in every document identifier
    FISCAL_COUNTRY_CODE = data.get("FISCAL_COUNTRY_CODE", "CV")
    FISCAL_REPOSITORY_CODE = str(data.get("FISCAL_REPOSITORY_CODE", "3"))  # 1 principal, 2 homologation, 3 test
    FISCAL_ISSUER_TAX_ID = str(data.get("FISCAL_ISSUER_TAX_ID", "123456789"))
    FISCAL_LED_CODE = str(data.get("FISCAL_LED_CODE", "1"))
    FISCAL_DEFAULT_SERIES = data.get("FISCAL_DEFAULT_SERIES", "A")

    # Tax rates (percent)
    FISCAL_WITHHOLDING_RATE = data.get("FISCAL_WITHHOLDING_RATE", 4)
    FISCAL_DEFAULT_TAX_RATE = data.get("FISCAL_DEFAULT_TAX_RATE", 15)
    FISCAL_TAX_ID_CHECKSUM_ENABLED = bool(data.get("FISCAL_TAX_ID_CHECKSUM_ENABLED", True))
    FISCAL_QR_BASE_URL = data.get("FISCAL_QR_BASE_URL", "https://pe.efatura.cv/dfe/view/")

    # Settlement ledger
    LEDGER_WEBHOOK_URL = data.get("LEDGER_WEBHOOK_URL", None)

    # Fiscal authority transmission
    FISCAL_AUTHORITY_URL = data.get("FISCAL_AUTHORITY_URL", None)
    FISCAL_AUTHORITY_API_KEY = data.get("FISCAL_AUTHORITY_API_KEY", None)
    FISCAL_TRANSMISSION_ENABLED = bool(data.get("FISCAL_TRANSMISSION_ENABLED", True))
    FISCAL_TRANSMISSION_INTERVAL_SECONDS = data.get("FISCAL_TRANSMISSION_INTERVAL_SECONDS", 300)
    FISCAL_TRANSMISSION_MAX_ATTEMPTS = data.get("FISCAL_TRANSMISSION_MAX_ATTEMPTS", 10)
    FISCAL_TRANSMISSION_BATCH_SIZE = data.get("FISCAL_TRANSMISSION_BATCH_SIZE", 50)
