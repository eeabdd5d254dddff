# utils/auth.py
"""
FastAPI auth dependencies.

verify_token decodes the bearer JWT; get_current_user re-reads the caller's
role from the UserType table so role changes take effect immediately.
"""
import logging

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError
from sqlalchemy.orm import Session

from database import get_session
from models import UserType
from utils.exceptions import ForbiddenError
from utils.security import decode_access_token

logger = logging.getLogger(__name__)


# Token Auth Dependency
def verify_token(request: Request) -> dict:
     auth = request.headers.get("Authorization")
     if not auth or not auth.startswith("Bearer "):
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
     token = auth.split(" ", 1)[1]
     try:
          payload = decode_access_token(token)
     except JWTError:
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
     if not payload.get("id"):
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
     return payload


def get_current_user(
     token: dict = Depends(verify_token),
     db: Session = Depends(get_session),
) -> dict:
     """Resolve the caller into {"id", "role"} using the stored role record."""
     user_type = db.query(UserType).filter(UserType.user_id == token["id"]).first()
     if not user_type:
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
     return {"id": user_type.user_id, "role": user_type.type.value}


def require_role(*roles: str):
     """Dependency factory: only callers holding one of ``roles`` pass."""

     def checker(caller: dict = Depends(get_current_user)) -> dict:
          if caller["role"] not in roles:
               logger.warning("Role %s denied, requires one of %s", caller["role"], roles)
               raise ForbiddenError(f"Access denied. Required user type: {', '.join(roles)}")
          return caller

     return checker
