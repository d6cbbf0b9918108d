from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from govdash.headers import DEFAULT_SCAN_LIMIT


DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


@dataclass(frozen=True)
class Settings:
    store_backend: str = "file"
    store_path: str = "./data"
    store_name: str = "dashboard-data"
    store_key: str = "latest"
    admin_key: str = ""
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    header_scan_limit: int = DEFAULT_SCAN_LIMIT


def _as_int(value: Optional[str], default: int) -> int:
    try:
        out = int(str(value).strip())
    except Exception:
        return default
    return out if out > 0 else default


def _as_list(value: Optional[str], default: List[str]) -> List[str]:
    if value is None:
        return list(default)
    return [part.strip() for part in value.split(",") if part.strip()]


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from ``GOVDASH_*`` environment variables."""
    env = os.environ if environ is None else environ
    return Settings(
        store_backend=(env.get("GOVDASH_STORE_BACKEND") or "file").strip().lower(),
        store_path=env.get("GOVDASH_STORE_PATH") or "./data",
        store_name=env.get("GOVDASH_STORE_NAME") or "dashboard-data",
        store_key=env.get("GOVDASH_STORE_KEY") or "latest",
        admin_key=env.get("GOVDASH_ADMIN_KEY", ""),
        cors_origins=_as_list(env.get("GOVDASH_CORS_ORIGINS"), DEFAULT_CORS_ORIGINS),
        header_scan_limit=_as_int(env.get("GOVDASH_HEADER_SCAN_LIMIT"), DEFAULT_SCAN_LIMIT),
    )
