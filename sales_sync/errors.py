"""
Error taxonomy for the upload pipeline.

Every failure carries the stage it happened in so entry points can surface a
single message per upload. Input errors are raised before any spreadsheet
call; remote errors abort the remaining stages. ``FormatError`` is only ever
reported inside a sync result, never raised to the caller.
"""
from __future__ import annotations

from typing import Optional, Sequence


class SalesSyncError(Exception):
    """Base class for pipeline failures."""

    stage = "pipeline"
    #: True when the failure was caused by the caller's input (HTTP 400).
    client_error = False

    def __init__(self, message: str, *, cause: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        text = f"[{self.stage}] {self.message}"
        if self.cause and self.cause not in self.message:
            text += f": {self.cause}"
        return text


class InvalidArgument(SalesSyncError):
    stage = "validate"
    client_error = True


class UnsupportedFormat(SalesSyncError):
    stage = "decode"
    client_error = True


class EmptyInput(SalesSyncError):
    stage = "decode"
    client_error = True


class DecodeError(SalesSyncError):
    stage = "decode"
    client_error = True


class HeaderNotFound(SalesSyncError):
    stage = "resolve_headers"
    client_error = True

    def __init__(self, missing: Sequence[str], available: Sequence[str] = ()) -> None:
        self.missing = list(missing)
        self.available = list(available)
        super().__init__(
            "One or more required headers (%s) not found in file" % ", ".join(self.missing)
        )


class TabAccessError(SalesSyncError):
    stage = "resolve_tab"


class ClearError(SalesSyncError):
    stage = "clear"


class WriteError(SalesSyncError):
    stage = "write"


class FormatError(SalesSyncError):
    stage = "format"


__all__ = [
    "ClearError",
    "DecodeError",
    "EmptyInput",
    "FormatError",
    "HeaderNotFound",
    "InvalidArgument",
    "SalesSyncError",
    "TabAccessError",
    "UnsupportedFormat",
    "WriteError",
]
