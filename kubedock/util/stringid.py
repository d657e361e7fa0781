"""Random hexadecimal identifiers and their short forms."""

import re
import secrets

SHORT_LEN = 12

_SHORT_ID = re.compile(r"[a-f0-9]{12}")
_FULL_ID = re.compile(r"[a-f0-9]{64}")
_NUMERIC = re.compile(r"[0-9]+")


def is_short_id(id: str) -> bool:
    """Return True if the string looks like a short identifier."""
    return _SHORT_ID.fullmatch(id) is not None


def truncate_id(id: str) -> str:
    """Return the short form of an identifier, dropping any ``algo:`` prefix."""
    if ":" in id:
        id = id.partition(":")[2]
    return id[:SHORT_LEN]


def generate_random_id() -> str:
    """Return a new random 64 character hexadecimal identifier.

    Identifiers whose short form is all digits are rejected, as those
    cause trouble when used as host names.
    """
    while True:
        candidate = secrets.token_hex(32)
        if _NUMERIC.fullmatch(truncate_id(candidate)) is None:
            return candidate


def validate_id(id: str) -> None:
    """Raise ValueError unless the string is a full 64 character identifier."""
    if _FULL_ID.fullmatch(id) is None:
        raise ValueError(f'image ID "{id}" is invalid')