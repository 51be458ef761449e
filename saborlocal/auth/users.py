from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import bcrypt
from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class AuthConfig:
    admin_email: str = os.getenv("ADMIN_EMAIL", "admin@example.com")
    # bcrypt hash; the demo password "admin123" is used when unset
    admin_password_hash: str = os.getenv("ADMIN_PASSWORD_HASH", "")
    session_secret: str = os.getenv("SESSION_SECRET", "saborlocal-dev-secret-change-me")


DEFAULT_AUTH_CONFIG = AuthConfig()

_users: dict[str, dict[str, Any]] = {}


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode(), hashed.encode())
    except ValueError:
        # Malformed hash in the environment
        return False


def _seed_users(config: AuthConfig = DEFAULT_AUTH_CONFIG) -> None:
    """Register the configured admin plus a demo editor account."""
    _users.clear()
    _users[config.admin_email.lower()] = {
        "password_hash": config.admin_password_hash or _hash_password("admin123"),
        "role": "admin",
    }
    _users["editor@example.com"] = {"password_hash": _hash_password("editor123"), "role": "editor"}


def authenticate(email: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{email, role}`` or ``None``."""
    key = email.strip().lower()
    record = _users.get(key)
    if record and _verify_password(password, record["password_hash"]):
        return {"email": key, "role": record["role"]}
    return None


_seed_users()
