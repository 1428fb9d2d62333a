import os
import tempfile
from pathlib import Path

# Settings are read once at import; pin a throwaway SQLite DB before any app module loads.
_DB_DIR = Path(tempfile.mkdtemp(prefix="gotid_cloud_test_"))
os.environ.setdefault("DATABASE_URL", f"sqlite+pysqlite:///{_DB_DIR / 'gotid_test.db'}")
os.environ.setdefault("AUTO_CREATE_DB", "true")
os.environ.setdefault("AUTO_RUN_MIGRATIONS", "false")
os.environ.setdefault("DEV_ALLOW_NO_TOKEN", "false")
os.environ.setdefault("API_TOKEN", "test-api-token-strong-value-123456")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-strong-value-123456")
os.environ.setdefault("UUID_MISSING_DEDUP_SEC", "0")
os.environ.setdefault("GOTID_ENV", "dev")
