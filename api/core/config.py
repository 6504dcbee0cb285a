"""
Environment-driven settings.

Every setting is read lazily through a small accessor so tests can patch the
environment without reloading modules.
"""

from __future__ import annotations

import os


def env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, "").strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def app_name() -> str:
    return env_str("APP_NAME", "TrueSocial")


def client_url() -> str:
    return env_str("CLIENT_URL", "http://localhost:5173")


def cookie_secure() -> bool:
    # Production deployments serve the frontend from another origin over TLS.
    return env_bool("COOKIE_SECURE", False)
