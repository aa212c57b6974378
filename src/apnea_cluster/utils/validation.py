"""Validation utilities for apnea-cluster."""

from datetime import datetime


def validate_date_format(date_str: str) -> str:
    """
    Validate a date string in YYYY-MM-DD format.

    Args:
        date_str: Date string

    Returns:
        The date string, normalized to YYYY-MM-DD

    Raises:
        ValueError: If date format is invalid
    """
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date().isoformat()
    except ValueError:
        raise ValueError(
            f"Invalid date format: '{date_str}'. Expected format: YYYY-MM-DD (e.g., 2024-01-15)"
        ) from None
