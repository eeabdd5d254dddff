# services/token_service.py
"""
Token Service - one-time codes for email verification and password reset.

Issuing a code:
1. Refuse when the email already received RATE_LIMIT_MAX codes of that
   purpose in the trailing RATE_LIMIT_WINDOW
2. Expire every pending code of the same purpose for the user
3. Draw a 6-digit code not held by any other live pending code
4. Insert the new pending row

Steps 2-4 run in one transaction, so a user never ends up with zero or two
authoritative pending codes.

Verification rejects unknown, expired and attempt-exhausted codes. The
caller finalizes a successful check with mark_as_verified and records
failed guesses with record_failed_attempt.
"""
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, ExpiredSignatureError, JWTError
from sqlalchemy import update
from sqlalchemy.orm import Session

from models import Token, TokenPurpose, TokenStatus, User
from models.base import utcnow
from utils.exceptions import BadRequestError, NotFoundError, TooManyRequestsError
from utils.security import ALGORITHM, get_verification_secret

logger = logging.getLogger(__name__)

CODE_MIN = 100000
CODE_MAX = 999999
VERIFICATION_CODE_TTL = timedelta(minutes=12)
RESET_CODE_TTL = timedelta(minutes=10)
SIGNED_URL_TTL = timedelta(minutes=15)
MAX_ATTEMPTS = 5
MAX_GENERATION_ATTEMPTS = 10
RATE_LIMIT_WINDOW = timedelta(minutes=60)
RATE_LIMIT_MAX = 3

MAX_ATTEMPTS_MESSAGE = "Maximum verification attempts exceeded. Please request a new code."


def generate_code() -> str:
     """Return a 6-digit numeric code."""
     return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))


def get_recent_code_count(
     db: Session,
     email: str,
     purpose: TokenPurpose = TokenPurpose.EMAIL_VERIFICATION
) -> int:
     """Number of codes of ``purpose`` issued to ``email`` in the trailing hour."""
     since = utcnow() - RATE_LIMIT_WINDOW
     return db.query(Token).filter(
          Token.email == email.lower(),
          Token.purpose == purpose,
          Token.created_at >= since
     ).count()


def check_rate_limit(
     db: Session,
     email: str,
     purpose: TokenPurpose = TokenPurpose.EMAIL_VERIFICATION
) -> bool:
     """True while another code may still be issued to ``email``."""
     return get_recent_code_count(db, email, purpose) < RATE_LIMIT_MAX


def _draw_unique_code(db: Session, purpose: TokenPurpose) -> str:
     now = utcnow()
     for _ in range(MAX_GENERATION_ATTEMPTS):
          code = generate_code()
          clash = db.query(Token.id).filter(
               Token.token == code,
               Token.purpose == purpose,
               Token.status == TokenStatus.PENDING,
               Token.expires_at > now
          ).first()
          if clash is None:
               return code
     raise BadRequestError("Failed to generate unique verification code")


def _issue_code(
     db: Session,
     user_id: str,
     email: str,
     purpose: TokenPurpose,
     ttl: timedelta
) -> str:
     email = email.lower()
     if not check_rate_limit(db, email, purpose):
          logger.warning("Rate limit reached for %s codes to %s", purpose.value, email)
          raise TooManyRequestsError(
               "Too many codes requested. Please try again later."
          )

     db.execute(
          update(Token)
          .where(
               Token.user_id == user_id,
               Token.purpose == purpose,
               Token.status == TokenStatus.PENDING
          )
          .values(status=TokenStatus.EXPIRED, updated_at=utcnow())
          .execution_options(synchronize_session="fetch")
     )

     code = _draw_unique_code(db, purpose)
     now = utcnow()
     db.add(Token(
          user_id=user_id,
          purpose=purpose,
          token=code,
          email=email,
          expires_at=now + ttl,
          attempts=0,
          status=TokenStatus.PENDING,
          created_at=now,
     ))
     db.flush()
     logger.info("Issued %s code for user %s", purpose.value, user_id)
     return code


def create_verification_code(db: Session, user_id: str, email: str) -> str:
     """
     Issue a new email verification code and return it in plaintext.

     Supersedes any pending verification code of the user. The caller owns
     the commit, so the supersede and the insert land together.

     Raises:
          TooManyRequestsError: If the hourly limit for ``email`` is reached.
          BadRequestError: If no unique code could be drawn.
     """
     return _issue_code(db, user_id, email, TokenPurpose.EMAIL_VERIFICATION, VERIFICATION_CODE_TTL)


def create_reset_code(db: Session, user_id: str, email: str) -> str:
     """Issue a password reset code. Same rules as create_verification_code."""
     return _issue_code(db, user_id, email, TokenPurpose.RESET_PASSWORD, RESET_CODE_TTL)


def _reject_unusable(db: Session, token: Token, label: str) -> None:
     """Expire and reject a token that timed out or ran out of attempts."""
     if token.is_expired():
          token.mark_as_expired()
          db.commit()
          raise BadRequestError(f"{label} has expired")

     if (token.attempts or 0) >= MAX_ATTEMPTS:
          token.mark_as_expired()
          db.commit()
          raise BadRequestError(MAX_ATTEMPTS_MESSAGE)


def verify_code(db: Session, email: str, code: str) -> dict:
     """
     Check an email verification code.

     Returns:
          {"user_id": ..., "token_id": ...} for the caller to finalize.

     Raises:
          BadRequestError: Unknown code, expired code, attempts exhausted,
               or the account is already verified.
          NotFoundError: The owning user no longer exists.
     """
     token = db.query(Token).filter(
          Token.email == email.lower(),
          Token.token == code,
          Token.purpose == TokenPurpose.EMAIL_VERIFICATION,
          Token.status == TokenStatus.PENDING
     ).first()

     if not token:
          raise BadRequestError("Invalid verification code")

     _reject_unusable(db, token, "Verification code")

     user = db.query(User).filter(User.id == token.user_id).first()
     if not user:
          raise NotFoundError("User not found")

     if user.is_verified:
          raise BadRequestError("Account is already verified")

     return {"user_id": token.user_id, "token_id": token.id}


def verify_reset_code(db: Session, code: str) -> Token:
     """
     Check a password reset code; returns the pending Token row.

     Reset codes are looked up by value alone. A live row wins over a stale
     pending row that happens to hold the same code.
     """
     candidates = db.query(Token).filter(
          Token.token == code.strip(),
          Token.purpose == TokenPurpose.RESET_PASSWORD,
          Token.status == TokenStatus.PENDING
     ).order_by(Token.created_at.desc())
     token = candidates.filter(Token.expires_at > utcnow()).first() or candidates.first()

     if not token:
          raise BadRequestError("Invalid or expired OTP")

     _reject_unusable(db, token, "Reset code")
     return token


def find_pending_token(db: Session, email: str, purpose: TokenPurpose) -> Optional[Token]:
     """Most recent pending token of ``purpose`` for ``email``, if any."""
     return db.query(Token).filter(
          Token.email == email.lower(),
          Token.purpose == purpose,
          Token.status == TokenStatus.PENDING
     ).order_by(Token.created_at.desc()).first()


def mark_as_verified(db: Session, token_id: str) -> None:
     db.execute(
          update(Token)
          .where(Token.id == token_id)
          .values(status=TokenStatus.VERIFIED, updated_at=utcnow())
          .execution_options(synchronize_session="fetch")
     )


def increment_attempts(db: Session, token_id: str) -> None:
     # Single UPDATE so concurrent failures are all counted
     db.execute(
          update(Token)
          .where(Token.id == token_id)
          .values(attempts=Token.attempts + 1, updated_at=utcnow())
          .execution_options(synchronize_session="fetch")
     )


def record_failed_attempt(
     db: Session,
     email: str,
     purpose: TokenPurpose = TokenPurpose.EMAIL_VERIFICATION
) -> None:
     """
     Count a wrong guess against the current pending code of ``email``.

     The guess that reaches MAX_ATTEMPTS expires the code on the spot.

     Raises:
          BadRequestError: When this guess used up the last attempt.
     """
     pending = find_pending_token(db, email, purpose)
     if not pending:
          return

     increment_attempts(db, pending.id)
     db.commit()
     db.refresh(pending)

     if pending.attempts >= MAX_ATTEMPTS:
          pending.mark_as_expired()
          db.commit()
          logger.warning("Code %s burnt after %d wrong guesses", pending.id, pending.attempts)
          raise BadRequestError(MAX_ATTEMPTS_MESSAGE)


def sign_verification_url(code: str, email: str) -> str:
     """Wrap {code, email} in a JWT valid for 15 minutes, for emailed links."""
     payload = {
          "code": code,
          "email": email.lower(),
          "exp": datetime.now(timezone.utc) + SIGNED_URL_TTL,
     }
     return jwt.encode(payload, get_verification_secret(), algorithm=ALGORITHM)


def verify_signed_url(signed_token: str) -> dict:
     """
     Unwrap a signed verification link.

     Returns:
          {"code": ..., "email": ...}

     Raises:
          BadRequestError: Expired link, invalid link, or any other failure.
     """
     secret = get_verification_secret()
     try:
          decoded = jwt.decode(signed_token, secret, algorithms=[ALGORITHM])
     except ExpiredSignatureError:
          raise BadRequestError("Verification link has expired")
     except JWTError:
          raise BadRequestError("Invalid verification link")
     except Exception:
          raise BadRequestError("Failed to verify link")

     code = decoded.get("code")
     email = decoded.get("email")
     if not code or not email:
          raise BadRequestError("Invalid verification link")
     return {"code": code, "email": email}


def purge_expired_tokens(db: Session) -> int:
     """Delete every token past its expiry. Returns the number of rows removed."""
     deleted = db.query(Token).filter(Token.expires_at < utcnow()).delete(
          synchronize_session=False
     )
     if deleted:
          logger.info("Purged %d expired tokens", deleted)
     return deleted


def delete_user_tokens(db: Session, user_id: str) -> int:
     return db.query(Token).filter(Token.user_id == user_id).delete()
