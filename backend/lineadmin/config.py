import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "postgresql://lineadmin:lineadmin@db:5432/lineadmin")
APP_ENV = os.getenv("APP_ENV", "local")

# Admin access (manual sweep trigger).
# In prod/stage, ADMIN_PASSWORD must be set via env. For test/local, a fallback is allowed only if bypass is enabled.
ALLOW_INSECURE_ADMIN_BYPASS = os.getenv("ALLOW_INSECURE_ADMIN_BYPASS", "true").lower() == "true" if APP_ENV in {"test", "local"} else False
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
if ADMIN_PASSWORD is None:
	if ALLOW_INSECURE_ADMIN_BYPASS:
		ADMIN_PASSWORD = "admin1234"
	else:
		raise RuntimeError("ADMIN_PASSWORD is required")

# Connection pool
DB_POOL_MIN = int(os.getenv("DB_POOL_MIN", "1"))
DB_POOL_MAX = int(os.getenv("DB_POOL_MAX", "5"))

# Lock check sweep cadence (seconds) and parallelism (1 = sequential)
LOCK_CHECK_INTERVAL_SECONDS = int(os.getenv("LOCK_CHECK_INTERVAL_SECONDS", "60"))
LOCK_CHECK_WORKERS = max(1, int(os.getenv("LOCK_CHECK_WORKERS", "1")))

# Job / store query timeouts (ms)
JOB_LOCK_TIMEOUT_MS = int(os.getenv("JOB_LOCK_TIMEOUT_MS", "2000"))
JOB_STATEMENT_TIMEOUT_MS = int(os.getenv("JOB_STATEMENT_TIMEOUT_MS", "20000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
