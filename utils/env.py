"""
Environment variable helpers with whitespace sanitization.
"""
import os
from typing import Optional


def get_env_str(
    name: str,
    default: Optional[str] = None,
    required: bool = False,
    strip: bool = True
) -> Optional[str]:
    """
    Read an environment variable, stripping surrounding whitespace by default.

    A stray newline in SHOPIFY_API_SECRET breaks every HMAC and session token
    check, so secrets should always go through here.

    Args:
        name: Environment variable name
        default: Returned when the variable is unset or blank
        required: Raise ValueError instead of returning the default
        strip: Strip leading/trailing whitespace

    Raises:
        ValueError: required=True and the value is missing or blank
    """
    value = os.getenv(name)

    if value is None:
        if required:
            raise ValueError(f"Required environment variable '{name}' is not set.")
        return default

    if strip:
        value = value.strip()

    if not value:
        if required:
            raise ValueError(f"Required environment variable '{name}' is empty (or whitespace-only).")
        return default

    return value


def get_env_bool(name: str, default: bool = False) -> bool:
    """
    Truthy values: "1", "true", "yes", "on" (case-insensitive).
    Anything else set is False; unset or blank returns the default.
    """
    value = os.getenv(name, "").strip().lower()

    if not value:
        return default

    return value in ("1", "true", "yes", "on")
