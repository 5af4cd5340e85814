from __future__ import annotations

import os


def _int_env(name: str, default: int) -> int:
    raw = (os.environ.get(name) or "").strip()
    return int(raw) if raw else default


def load_config() -> dict:
    return {
        "SECRET_KEY": os.environ.get("SECRET_KEY", "dev-secret-change-me"),
        "SQLALCHEMY_DATABASE_URI": os.environ.get("DATABASE_URL", "sqlite:///secret_exchange.db"),
        "SQLALCHEMY_TRACK_MODIFICATIONS": False,
        # argon2 time cost and memory (KiB) for contact-address hashes
        "CONTACT_HASH_ROUNDS": _int_env("CONTACT_HASH_ROUNDS", 3),
        "CONTACT_HASH_MEMORY_COST": _int_env("CONTACT_HASH_MEMORY_COST", 65536),
        "ASSIGNMENT_MAX_ATTEMPTS": _int_env("ASSIGNMENT_MAX_ATTEMPTS", 100),
        "DESCRIPTION_MAX_LENGTH": 200,
        "LOG_LEVEL": os.environ.get("LOG_LEVEL", "INFO").upper(),
        # Forms validate JSON bodies; bearer tokens replace CSRF cookies.
        "WTF_CSRF_ENABLED": False,
    }
