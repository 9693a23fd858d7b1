"""Environment loading shared by the CLI scripts."""

import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def load_dotenv(env_path: Path | None = None) -> None:
    """Load a .env file from the project root into os.environ (simple parser)."""
    env_path = env_path or PROJECT_ROOT / ".env"
    if not env_path.exists():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip()
            # Strip surrounding quotes if present
            if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
                value = value[1:-1]
            os.environ.setdefault(key, value)


def get_database_url() -> str:
    """Return DATABASE_URL from the environment or the .env file."""
    load_dotenv()
    url = os.environ.get("DATABASE_URL")
    if not url:
        print("ERROR: DATABASE_URL not set and no .env file found.", file=sys.stderr)
        sys.exit(1)
    return url
