"""Request identity

Authentication happens upstream; the gateway forwards the user as X-User-Id.
"""

from typing import Optional
from fastapi import Header
from libs.result import Error
from src.api.error import ClientError


async def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
) -> str:
    if not x_user_id or not x_user_id.strip():
        raise ClientError(
            Error(code="UNAUTHENTICATED", message="Missing X-User-Id header")
        )
    return x_user_id.strip()
