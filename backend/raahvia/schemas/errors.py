from __future__ import annotations

import datetime as dt

from pydantic import BaseModel


class ErrorBody(BaseModel):
    code: str  # NOT_FOUND | VALIDATION_ERROR | INTERNAL_ERROR
    message: str
    path: str


class ErrorEnvelope(BaseModel):
    success: bool = False
    error: ErrorBody
    timestamp: dt.datetime
