"""Exceptions raised by the tracker services."""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for tracker failures."""


class CredentialError(TrackerError):
    """No usable Google credential: missing refresh token or refresh failed."""


class SheetFormatError(TrackerError):
    """The Sheets API answered with a payload we cannot interpret as rows."""


__all__ = ["TrackerError", "CredentialError", "SheetFormatError"]
