# utils/security.py
"""
Password hashing and JWT helpers shared by the auth dependencies and services.
"""
import os
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt
from passlib.context import CryptContext

ALGORITHM = "HS256"

# Bcrypt
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
     return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
     return pwd_context.verify(password, hashed)


def get_jwt_secret() -> str:
     secret = os.getenv("JWT_SECRET")
     if not secret:
          raise RuntimeError("JWT_SECRET must be set")
     return secret


def get_verification_secret() -> str:
     """Secret for emailed verification links; falls back to JWT_SECRET."""
     secret = os.getenv("JWT_VERIFICATION_SECRET") or os.getenv("JWT_SECRET")
     if not secret:
          raise RuntimeError("JWT_SECRET or JWT_VERIFICATION_SECRET must be set")
     return secret


def create_access_token(user_id: str, role: str, expires_minutes: Optional[int] = None) -> str:
     """Sign a bearer token carrying {id, role}."""
     if expires_minutes is None:
          expires_minutes = int(os.getenv("JWT_EXPIRES_MINUTES", "1440"))
     payload = {
          "id": user_id,
          "role": role,
          "exp": datetime.now(timezone.utc) + timedelta(minutes=expires_minutes),
     }
     return jwt.encode(payload, get_jwt_secret(), algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
     """Raises jose.JWTError when the token is invalid or expired."""
     return jwt.decode(token, get_jwt_secret(), algorithms=[ALGORITHM])
