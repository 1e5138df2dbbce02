"""Request dependencies resolving the caller from a Supabase bearer token."""

import logging

from fastapi import Depends, Header, HTTPException

from .. import db

logger = logging.getLogger(__name__)


async def current_user_id(authorization: str | None = Header(default=None)) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="No authorization header")

    token = authorization.removeprefix("Bearer ").strip()
    try:
        user_id = db.get_user_id(token)
    except Exception:
        logger.exception("Token verification failed")
        user_id = None
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user_id


async def admin_user_id(user_id: str = Depends(current_user_id)) -> str:
    if not db.is_admin(user_id):
        raise HTTPException(status_code=403, detail="Forbidden: Admin role required")
    return user_id
