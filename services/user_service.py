# services/user_service.py
"""
User Service - account lifecycle on top of the User and UserType tables.

Covers signup with email verification, login, password reset and the
self-or-admin profile operations.
"""
import logging
import uuid
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from models import Booking, Property, User, UserType, UserRole, TokenPurpose
from models.base import utcnow
from services import token_service
from utils.email import (
     send_verification_email,
     send_password_reset_email,
     send_password_changed_email,
)
from utils.exceptions import (
     BadRequestError,
     ConflictError,
     NotFoundError,
     UnauthorizedError,
)
from utils.security import hash_password, verify_password, create_access_token

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def _validate_user_id(user_id: str) -> str:
     try:
          return str(uuid.UUID(str(user_id)))
     except (ValueError, TypeError, AttributeError):
          raise BadRequestError("Invalid user ID")


class UserService:
     """Service class for account-related business logic."""

     @staticmethod
     def get_user_type(db: Session, user_id: str) -> str:
          user_type = db.query(UserType).filter(UserType.user_id == user_id).first()
          if not user_type:
               raise NotFoundError("User type not found")
          return user_type.type.value

     @staticmethod
     def find_by_email(db: Session, email: str) -> Optional[User]:
          return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()

     @staticmethod
     def _ensure_unique(db: Session, email: str = None, phone_number: str = None, exclude_id: str = None) -> None:
          if email:
               query = db.query(User.id).filter(func.lower(User.email) == email.lower())
               if exclude_id:
                    query = query.filter(User.id != exclude_id)
               if query.first():
                    raise ConflictError("Email already exists")
          if phone_number:
               query = db.query(User.id).filter(User.phone_number == phone_number)
               if exclude_id:
                    query = query.filter(User.id != exclude_id)
               if query.first():
                    raise ConflictError("Phone number already exists")

     @staticmethod
     def signup(db: Session, payload) -> dict:
          """
          Register a user together with their role record and a verification code.

          User, UserType and Token are written in one transaction. If any step
          after the inserts fails (code issuance, email delivery) the
          transaction is rolled back and the error propagates.

          Args:
               db: SQLAlchemy database session
               payload: SignupRequest

          Returns:
               {"user": User, "role": str}

          Raises:
               BadRequestError: Unknown role or missing student fields
               ConflictError: Email or phone number already registered
          """
          try:
               role = UserRole(payload.role)
          except ValueError:
               raise BadRequestError("Invalid user type")

          if role == UserRole.STUDENT:
               if not payload.university:
                    raise BadRequestError("University is required for students")
               if not payload.year_of_study:
                    raise BadRequestError("Year of study is required for students")

          email = payload.email.strip().lower()
          UserService._ensure_unique(db, email=email, phone_number=payload.phone_number)

          try:
               user = User(
                    full_name=payload.full_name.strip(),
                    email=email,
                    phone_number=payload.phone_number,
                    password=hash_password(payload.password),
                    university=payload.university if role == UserRole.STUDENT else None,
                    year_of_study=payload.year_of_study if role == UserRole.STUDENT else None,
               )
               db.add(user)
               db.flush()

               db.add(UserType(user_id=user.id, type=role))
               db.flush()

               code = token_service.create_verification_code(db, user.id, email)
               signed = token_service.sign_verification_url(code, email)
               send_verification_email(email, user.full_name, code, signed)

               db.commit()
          except Exception:
               db.rollback()
               logger.warning("Signup for %s rolled back", email)
               raise

          db.refresh(user)
          logger.info("Registered %s user %s", role.value, user.id)
          return {"user": user, "role": role.value}

     @staticmethod
     def verify_email(db: Session, email: str, code: str) -> User:
          """
          Verify an account with the emailed code.

          A wrong guess counts against the user's current pending code so
          the guess that reaches token_service.MAX_ATTEMPTS expires it.
          """
          try:
               result = token_service.verify_code(db, email, code)
          except BadRequestError as e:
               logger.warning("Verification rejected for %s: %s", email, e.message)
               if e.message == "Invalid verification code":
                    token_service.record_failed_attempt(db, email, TokenPurpose.EMAIL_VERIFICATION)
               raise

          user = db.query(User).filter(User.id == result["user_id"]).first()
          user.is_verified = True
          token_service.mark_as_verified(db, result["token_id"])
          db.commit()
          db.refresh(user)
          logger.info("Verified user %s", user.id)
          return user

     @staticmethod
     def verify_email_link(db: Session, signed_token: str) -> User:
          claims = token_service.verify_signed_url(signed_token)
          return UserService.verify_email(db, claims["email"], claims["code"])

     @staticmethod
     def resend_verification(db: Session, email: str) -> None:
          user = UserService.find_by_email(db, email)
          if not user:
               raise NotFoundError("User not found")
          if user.is_verified:
               raise BadRequestError("User already verified")

          code = token_service.create_verification_code(db, user.id, user.email)
          signed = token_service.sign_verification_url(code, user.email)
          try:
               send_verification_email(user.email, user.full_name, code, signed)
               db.commit()
          except Exception:
               db.rollback()
               raise

     @staticmethod
     def login(db: Session, email: str, password: str) -> dict:
          user = UserService.find_by_email(db, email)
          if not user:
               raise NotFoundError("User not found")
          if not user.is_verified:
               raise BadRequestError("Please verify your email first")
          if not verify_password(password, user.password):
               logger.warning("Failed login for user %s", user.id)
               raise UnauthorizedError("Invalid credentials")

          role = UserService.get_user_type(db, user.id)
          token = create_access_token(user.id, role)
          return {"token": token, "user": user, "role": role}

     @staticmethod
     def forgot_password(db: Session, email: str) -> None:
          """Email a password reset code. Also used to resend one."""
          user = UserService.find_by_email(db, email)
          if not user:
               raise NotFoundError("No account found with this email")

          code = token_service.create_reset_code(db, user.id, user.email)
          pending = token_service.find_pending_token(db, user.email, TokenPurpose.RESET_PASSWORD)
          user.reset_password_token = pending.id
          user.reset_password_expires = utcnow() + token_service.RESET_CODE_TTL
          try:
               send_password_reset_email(user.email, user.full_name, code)
               db.commit()
          except Exception:
               db.rollback()
               raise

     @staticmethod
     def resend_reset_code(db: Session, email: str) -> None:
          UserService.forgot_password(db, email)

     @staticmethod
     def reset_password(db: Session, code: str, new_password: str) -> User:
          if not new_password or len(new_password) < MIN_PASSWORD_LENGTH:
               raise BadRequestError(
                    f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
               )

          token = token_service.verify_reset_code(db, code)
          user = db.query(User).filter(User.id == token.user_id).first()
          if not user:
               raise NotFoundError("User not found")

          user.password = hash_password(new_password)
          user.reset_password_token = None
          user.reset_password_expires = None
          token.mark_as_verified()
          db.commit()
          db.refresh(user)
          logger.info("Password reset for user %s", user.id)

          # Notification only; the reset is already persisted
          try:
               send_password_changed_email(user.email, user.full_name)
          except Exception as e:
               logger.error("Password change email to %s failed: %s", user.email, e)
          return user

     @staticmethod
     def get_all_users(db: Session) -> list[User]:
          return db.query(User).order_by(User.created_at.desc()).all()

     @staticmethod
     def get_user_by_id(db: Session, user_id: str) -> User:
          user_id = _validate_user_id(user_id)
          user = db.query(User).filter(User.id == user_id).first()
          if not user:
               raise NotFoundError("User not found")
          return user

     @staticmethod
     def _check_self_or_admin(user_id: str, caller: dict) -> None:
          if caller.get("id") != user_id and caller.get("role") != UserRole.ADMIN.value:
               raise UnauthorizedError("Access denied")

     @staticmethod
     def update_user(db: Session, user_id: str, data, caller: dict) -> User:
          """
          Update profile fields. Only the user themself or an admin may do this.

          Args:
               data: UserUpdate; only provided fields are applied
          """
          user_id = _validate_user_id(user_id)
          UserService._check_self_or_admin(user_id, caller)

          user = db.query(User).filter(User.id == user_id).first()
          if not user:
               raise NotFoundError("User not found")

          changes = data.model_dump(exclude_unset=True, exclude_none=True)
          if "email" in changes:
               changes["email"] = changes["email"].strip().lower()
          UserService._ensure_unique(
               db,
               email=changes.get("email"),
               phone_number=changes.get("phone_number"),
               exclude_id=user_id,
          )
          if "password" in changes:
               changes["password"] = hash_password(changes["password"])

          for field, value in changes.items():
               setattr(user, field, value)

          db.commit()
          db.refresh(user)
          return user

     @staticmethod
     def delete_user(db: Session, user_id: str, caller: dict) -> User:
          """
          Delete a user with their role record, tokens and bookings.

          Bookings where the user is tenant or agent go in the same
          transaction. Properties they listed stay, unassigned. Self or admin
          only.
          """
          user_id = _validate_user_id(user_id)
          UserService._check_self_or_admin(user_id, caller)

          user = db.query(User).filter(User.id == user_id).first()
          if not user:
               raise NotFoundError("User not found")

          db.query(Booking).filter(
               or_(Booking.tenant_id == user_id, Booking.agent_id == user_id)
          ).delete(synchronize_session=False)
          db.query(Property).filter(Property.agent_id == user_id).update(
               {Property.agent_id: None}, synchronize_session=False
          )
          token_service.delete_user_tokens(db, user_id)
          db.query(UserType).filter(UserType.user_id == user_id).delete()
          db.query(User).filter(User.id == user_id).delete()
          db.commit()
          logger.info("Deleted user %s", user_id)
          return user
