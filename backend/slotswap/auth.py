# backend/slotswap/auth.py
"""
Identity dependency.

The gateway authenticates the caller and forwards a normalised identity in
the X-User-Id header. The backend trusts it as given and only checks that
the user exists and is active.
"""

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from .database import get_db
from .models import Users

logger = logging.getLogger(__name__)


def get_current_user(
    x_user_id: Optional[int] = Header(None, alias="X-User-Id"),
    db: Session = Depends(get_db),
) -> Users:
    if x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )

    user = db.get(Users, x_user_id)
    if not user or not user.is_active:
        logger.warning(f"Rejected request for unknown or inactive user {x_user_id}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown user",
        )
    return user
