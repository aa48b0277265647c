"""
FastAPI Authentication Dependencies

Caller identity is established upstream (API gateway); this service only reads
the forwarded identity headers.
"""

from fastapi import Header, HTTPException, status, Request
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)

KNOWN_ROLES = ("admin", "brand", "creator")


async def require_caller_context(
    request: Request,
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    x_user_role: Optional[str] = Header(None, alias="X-User-Role"),
    x_brand_id: Optional[str] = Header(None, alias="X-Brand-Id"),
) -> Dict[str, Optional[str]]:
    """
    Authentication dependency: require a forwarded user id and role.

    Returns:
        dict with user_id, role and brand_id. For brand callers without an
        explicit X-Brand-Id the user id is the brand id.

    Raises:
        HTTPException 401: identity headers missing or role unknown
    """
    if not x_user_id or not x_user_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User authentication required"
        )

    role = x_user_role.strip().lower()
    if role not in KNOWN_ROLES:
        logger.warning(f"Unknown role '{x_user_role}' on {request.url.path}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Unknown role: {x_user_role}"
        )

    brand_id = x_brand_id
    if role == "brand" and not brand_id:
        brand_id = x_user_id

    return {"user_id": x_user_id, "role": role, "brand_id": brand_id}


__all__ = [
    "KNOWN_ROLES",
    "require_caller_context",
]
