"""
Shared utility functions for jsonlingo.

This module contains common utilities used across the codebase.
"""

from __future__ import annotations

import time
import uuid
from datetime import datetime, timezone


def generate_id(prefix: str = "") -> str:
    """
    Generate a unique ID with optional prefix.
    
    Args:
        prefix: Optional prefix (e.g., "sess", "batch", "job")
        
    Returns:
        A unique ID like "job_a1b2c3d4e5f6"
    """
    uid = str(uuid.uuid4())[:12]
    return f"{prefix}_{uid}" if prefix else uid


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def truncate(text: str, limit: int = 50) -> str:
    """Shorten text for log messages."""
    return text if len(text) <= limit else f"{text[:limit]}..."
