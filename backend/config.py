# backend/config.py
import os
from pathlib import Path
from dotenv import load_dotenv

# --- Load env from backend/.env OR .env (whichever exists) ---
# Works whether you run from repo root or backend/
root = Path(__file__).resolve().parents[1]          # project root
backend_env = root / "backend" / ".env"
root_env = root / ".env"
if backend_env.exists():
    load_dotenv(backend_env)
elif root_env.exists():
    load_dotenv(root_env)

# === 🌍 App Configuration ===
ENV = os.getenv("ENV", "dev").lower()
AUTO_MIGRATE = os.getenv("AUTO_MIGRATE", "false").strip().lower() == "true"
# Global bearer guard; routes enforce auth on their own either way
USE_AUTH_MIDDLEWARE = os.getenv("USE_AUTH_MIDDLEWARE", "false").strip().lower() == "true"

# === 🌍 CORS Settings ===
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "ALLOWED_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173"
    ).split(",")
]

# === 🔐 Bearer tokens ===
JWT_SECRET = os.getenv("JWT_SECRET") or os.getenv("SECRET_KEY") or "dev_insecure_change_me"
JWT_ALGO = os.getenv("JWT_ALGO", "HS256")
JWT_EXPIRES_MIN = int(os.getenv("JWT_EXPIRES_MIN", "60"))
# Tolerate small clock drift (seconds)
JWT_LEEWAY_SEC = int(os.getenv("JWT_LEEWAY_SEC", "30"))

# === 🧩 Profile store behaviour ===
# How many times a sub-collection edit re-reads and re-applies after losing a version race
SUBCOLLECTION_MAX_ATTEMPTS = max(1, int(os.getenv("SUBCOLLECTION_MAX_ATTEMPTS", "5")))
# Bounded retry for reads when the database is unreachable
STORE_RETRY_ATTEMPTS = max(1, int(os.getenv("STORE_RETRY_ATTEMPTS", "3")))
STORE_RETRY_BASE_DELAY = float(os.getenv("STORE_RETRY_BASE_DELAY", "0.2"))

# === 🗄️ Database Configuration (robust) ===
def _resolve_sqlite_url(url: str) -> str:
    """Turn 'sqlite:///relative.db' into an absolute path under project root.
    Keep ':memory:' as-is. Ensure absolute paths use 4 slashes."""
    if not url.startswith("sqlite:"):
        return url
    # ':memory:' or driver params
    if ":memory:" in url:
        return url
    # Strip prefix and normalize path
    prefix = "sqlite:///"
    if url.startswith(prefix):
        path = url[len(prefix):]
        # Already absolute? (starts with /) -> ensure we return with four slashes
        if Path(path).is_absolute():
            return f"sqlite:////{Path(path).as_posix().lstrip('/')}"
        # Make absolute under project root
        abs_path = (root / path).resolve()
        return f"sqlite:////{abs_path.as_posix().lstrip('/')}"
    # Other sqlite forms -> return as-is
    return url

# Prefer env DATABASE_URL; if missing, persist to ./data/devprofiles.db
_env_db = os.getenv("DATABASE_URL")
if _env_db:
    DATABASE_URL = _resolve_sqlite_url(_env_db)
else:
    data_dir = (root / "data").resolve()
    data_dir.mkdir(parents=True, exist_ok=True)
    sqlite_path = (data_dir / "devprofiles.db").resolve()
    DATABASE_URL = f"sqlite:////{sqlite_path.as_posix().lstrip('/')}"

# Optional SQL echo for debugging (SQL_ECHO=true)
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"
