from __future__ import annotations

import datetime as dt


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def iso_now() -> str:
    """UTC timestamp as ISO-8601 with a trailing Z, as mobile clients expect."""
    return utc_now().isoformat().replace("+00:00", "Z")
