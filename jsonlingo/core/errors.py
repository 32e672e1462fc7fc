"""
Error definitions for the translation pipeline.

Only session-level errors reach the caller. Backend failures are retried
per job, detection failures fall back to a default language, and cache
failures degrade to a cache miss.
"""

from __future__ import annotations


class JsonLingoError(Exception):
    """Base exception for all custom errors."""


class AlreadyRunning(JsonLingoError):
    """Raised when a session is started or resumed while another is active."""


class NoTranslatableContent(JsonLingoError):
    """Raised when the input tree has no eligible strings."""


class NoSessionToResume(JsonLingoError):
    """Raised when resume is requested without an existing session."""


class BackendError(JsonLingoError):
    """Network, HTTP or timeout failure from the translator backend."""


class DetectionError(JsonLingoError):
    """Raised when the backend cannot detect the source language."""


class CacheError(JsonLingoError):
    """Raised when the durable cache tier fails."""
