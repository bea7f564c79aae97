from __future__ import annotations

import string
from datetime import datetime, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
LATEST = datetime.max.replace(tzinfo=timezone.utc)

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    # Naive datetimes are taken to be UTC already.
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def ascii_lower(text: str) -> str:
    """Lowercase ASCII letters only, leaving any other character untouched."""
    return text.translate(_ASCII_LOWER)
