from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class SanityConfig:
    project_id: str = os.getenv("SANITY_PROJECT_ID", "")
    dataset: str = os.getenv("SANITY_DATASET", "production")
    api_version: str = os.getenv("SANITY_API_VERSION", "2024-01-01")
    read_token: str = os.getenv("SANITY_API_READ_TOKEN", "")
    write_token: str = os.getenv("SANITY_API_WRITE_TOKEN", "")
    use_cdn: bool = _env_flag("SANITY_USE_CDN", True)
    timeout: float = 10.0
    cdn_host: str = "cdn.sanity.io"


DEFAULT_SANITY_CONFIG = SanityConfig()
