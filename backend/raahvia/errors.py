from __future__ import annotations

from typing import Optional


class RaahViaError(Exception):
    """Base class for all service errors."""


# --- Client side: always converted to the offline fallback -----------------

class RetrievalError(RaahViaError):
    """A scan attempt against the backend did not produce usable metadata."""

    transient = False


class NetworkError(RetrievalError):
    """Connection refused, DNS failure, reset, protocol error."""

    transient = True


class ScanTimeoutError(RetrievalError):
    """The client-side deadline fired before the backend answered."""

    transient = True


class HttpStatusError(RetrievalError):
    def __init__(self, status_code: int, reason: str = ""):
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"HTTP {status_code}: {reason}".rstrip(": "))


class PayloadValidationError(RetrievalError):
    """Well-formed response lacking the fields navigation needs."""


# --- Gateway side ------------------------------------------------------------

class NotFoundError(RaahViaError):
    def __init__(self, resource: str, key: Optional[str] = None):
        self.resource = resource
        self.key = key
        msg = f"{resource} not found" if key is None else f"{resource} '{key}' not found"
        super().__init__(msg)
