"""Custom exception hierarchy for parkwatch."""

from __future__ import annotations


class ParkwatchError(Exception):
    """Base exception for all parkwatch errors."""


class ParkwatchConfigError(ParkwatchError):
    """Invalid or missing configuration."""


class ParkwatchPayloadError(ParkwatchError):
    """Incoming event payload rejected before reaching the reducer.

    Raised for a missing ``type`` discriminator or a record that fails
    validation.  The HTTP layer maps this to a ``400`` response.
    """

    def __init__(self, message: str, *, payload: object = None) -> None:
        self.payload = payload
        super().__init__(message)
