"""Session cache key patterns. Single place for key format.

Key components must not contain CACHE_KEY_SEP or glob metacharacters, so
a per-identity pattern can never match another identity's keys.
"""

from account_purge.core.constants import CACHE_KEY_SEP

_FORBIDDEN = (CACHE_KEY_SEP, "*", "?", "[", "]", "\\")


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValueError if value is empty or could widen a SCAN pattern.

    Args:
        value: String component used in a cache key.
        name: Name of the component (for error message).
    """
    if not value:
        raise ValueError(f"Cache key component {name!r} must not be empty")
    for ch in _FORBIDDEN:
        if ch in value:
            raise ValueError(
                f"Cache key component {name!r} must not contain {ch!r}"
            )


def session_pattern(prefix: str, uid: str) -> str:
    """SCAN pattern matching every session key of one identity."""
    _validate_key_component(uid, "uid")
    return f"{prefix}{CACHE_KEY_SEP}{uid}{CACHE_KEY_SEP}*"
