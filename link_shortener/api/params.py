"""Common API parameter definitions.

This module provides reusable parameter definitions for FastAPI endpoints.
"""

from fastapi import Query


def LimitParam(default: int = 10) -> int:
    """
    Common limit parameter for pagination.

    Args:
        default: Default limit value

    Returns:
        A Query parameter with validation
    """
    return Query(
        default,
        ge=1,
        le=100,
        description="Number of records to return"
    )


def OffsetParam(default: int = 0) -> int:
    """
    Common offset parameter for pagination.

    Args:
        default: Default offset value

    Returns:
        A Query parameter with validation
    """
    return Query(
        default,
        ge=0,
        description="Number of records to skip"
    )
