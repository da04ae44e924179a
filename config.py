import os
import sys

from dotenv import load_dotenv

from enums.runtime_environment import RuntimeEnvironment

# Values already present in the environment win over .env (tests set theirs first)
load_dotenv(".env", override=False)


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() == "true"


_raw_environment = os.environ.get("RUNTIME_ENVIRONMENT", "DEV")
try:
    RUNTIME_ENVIRONMENT = RuntimeEnvironment(_raw_environment)
except ValueError:
    allowed = ", ".join(env.value for env in RuntimeEnvironment)
    sys.stderr.write(
        f"\nInvalid RUNTIME_ENVIRONMENT={_raw_environment!r}. Allowed values: {allowed}.\n"
        f"Set it in the environment or in .env, e.g. RUNTIME_ENVIRONMENT=DEV\n\n"
    )
    sys.exit(1)

# Database
DB_URL = os.environ.get("DB_URL", "sqlite+aiosqlite:///data/storefront.db")
DB_ECHO = _env_flag("DB_ECHO", "false")  # Log every SQL statement

# Orders
ORDER_NUMBER_PREFIX = os.environ.get("ORDER_NUMBER_PREFIX", "ORD")  # ORD-20250108-000001

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_MASK_SECRETS = _env_flag("LOG_MASK_SECRETS", "true")  # Customer phone/address/email
LOG_DIR = os.environ.get("LOG_DIR", "logs")
# A week of history while developing, less elsewhere
_default_retention = "7" if RUNTIME_ENVIRONMENT == RuntimeEnvironment.DEV else "5"
LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", _default_retention))
