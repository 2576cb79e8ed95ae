"""Exception types raised by descry."""

from __future__ import annotations


class DescryError(Exception):
    """Base class for descry failures."""


class InternalError(DescryError):
    """Malformed input detected by an internal parser guard."""
