"""
app/api/dependencies.py

Shared FastAPI dependencies for request context.
"""

from __future__ import annotations

from fastapi import Header

USER_ID_HEADER = "X-User-Id"


def get_triggering_user(
    user_id: str | None = Header(default=None, alias=USER_ID_HEADER),
) -> str | None:
    """
    Operator identity forwarded by the gateway, recorded as ``triggered_by``.
    """

    if user_id is None:
        return None
    return user_id.strip() or None
