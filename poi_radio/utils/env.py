from __future__ import annotations

import os
from typing import List, Optional

from dotenv import load_dotenv

# Load .env once on import so every radio entry point sees the same settings.
load_dotenv()


def _env_str(name: str, default: str = "") -> str:
    """Read a string env var, stripping whitespace."""
    return (os.getenv(name, default) or "").strip()


def _env_bool(name: str, default: bool = False) -> bool:
    raw = _env_str(name, str(default)).lower()
    return raw in {"y", "yes", "t", "true", "on", "1"}


def _env_csv(name: str) -> List[str]:
    """Comma-separated values with blanks removed."""
    return [x.strip() for x in _env_str(name, "").split(",") if x.strip()]


def _test_override(name: str) -> Optional[str]:
    # With TESTING=true, `TEST_<NAME>` wins over `<NAME>`.
    if not _env_bool("TESTING", False):
        return None
    return _env_str(f"TEST_{name}", "") or None


def _env_int(name: str, default: int = 0) -> int:
    override = _test_override(name)
    return int(override if override is not None else _env_str(name, str(default)) or default)


def _env_float(name: str, default: float = 0.0) -> float:
    override = _test_override(name)
    return float(override if override is not None else _env_str(name, str(default)) or default)
