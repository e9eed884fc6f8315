"""
Keys for service-to-service calls, i.e. the payment gateway callback pushing
payment events. INTERNAL_API_KEY may hold several comma-separated keys so the
gateway's key can be rotated without downtime.
"""
import os
import secrets
import warnings

_INTERNAL_API_KEYS: tuple[str, ...] = tuple(
    key.strip() for key in os.getenv("INTERNAL_API_KEY", "").split(",") if key.strip()
)

if not _INTERNAL_API_KEYS:
    warnings.warn(
        "INTERNAL_API_KEY is not set. Payment callbacks accept an insecure default key. "
        "Set this env var in production!",
        stacklevel=2,
    )
    _INTERNAL_API_KEYS = ("insecure-default-change-me",)

INTERNAL_API_KEYS: tuple[str, ...] = _INTERNAL_API_KEYS


def verify_api_key(provided_key: str) -> bool:
    """True when the key matches any accepted key. Every key is compared in constant time."""
    if not provided_key:
        return False
    matches = [secrets.compare_digest(str(provided_key), key) for key in INTERNAL_API_KEYS]
    return any(matches)
