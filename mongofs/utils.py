"""Utility helper functions for mongofs."""

import uuid
from datetime import datetime, timezone
from typing import List


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def get_current_timestamp() -> datetime:
    """
    Get the current UTC time.

    Returns:
        Timezone-aware datetime
    """
    return datetime.now(timezone.utc)


def parse_csv(value: str) -> List[str]:
    """
    Parse comma-separated string into list.

    Args:
        value: Comma-separated values (e.g., "text/csv, application/x-yaml")

    Returns:
        List of trimmed, non-empty strings
    """
    return [item.strip() for item in value.split(',') if item.strip()]
