# routers/users.py
"""
Account API routes: signup, email verification, login, password reset and
profile management.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_session
from models import User, UserRole
from services.user_service import UserService
from schemas.user import (
     SignupRequest,
     VerifyCodeRequest,
     EmailRequest,
     LoginRequest,
     ResetPasswordRequest,
     UserUpdate,
     UserResponse,
     LoginResponse,
     UserListResponse,
)
from utils.auth import get_current_user, require_role

router = APIRouter(prefix="/api/users", tags=["users"])


def _build_user_response(user: User) -> UserResponse:
     return UserResponse.model_validate(user)


# ---------------------------------------------------------------------------
# Signup & verification
# ---------------------------------------------------------------------------

@router.post("/signup", status_code=status.HTTP_201_CREATED, summary="Register a new account")
def signup(payload: SignupRequest, db: Session = Depends(get_session)):
     """
     Create the account and its role record, then email a 6-digit code and a
     verification link. Nothing is stored if the email cannot be sent.
     """
     result = UserService.signup(db, payload)
     return {
          "status": "success",
          "data": {
               "user": _build_user_response(result["user"]),
               "message": "Account created. Check your email for the verification code.",
          },
     }


@router.post("/verify-otp", summary="Verify email with the emailed code")
def verify_otp(payload: VerifyCodeRequest, db: Session = Depends(get_session)):
     user = UserService.verify_email(db, payload.email, payload.code)
     return {
          "status": "success",
          "data": {"user": _build_user_response(user), "message": "Email verified successfully"},
     }


@router.get("/verify-otp/{token}", summary="Verify email from the emailed link")
def verify_otp_link(token: str, db: Session = Depends(get_session)):
     user = UserService.verify_email_link(db, token)
     return {
          "status": "success",
          "data": {"user": _build_user_response(user), "message": "Email verified successfully"},
     }


@router.post("/resend-verify-otp", summary="Send a new verification code")
def resend_verify_otp(payload: EmailRequest, db: Session = Depends(get_session)):
     UserService.resend_verification(db, payload.email)
     return {"status": "success", "data": {"message": "Verification code sent"}}


# ---------------------------------------------------------------------------
# Login & password reset
# ---------------------------------------------------------------------------

@router.post("/login", summary="Log in and receive a bearer token")
def login(payload: LoginRequest, db: Session = Depends(get_session)):
     result = UserService.login(db, payload.email, payload.password)
     return {
          "status": "success",
          "data": LoginResponse(token=result["token"], user=_build_user_response(result["user"])),
     }


@router.post("/forget-password", summary="Email a password reset code")
def forget_password(payload: EmailRequest, db: Session = Depends(get_session)):
     UserService.forgot_password(db, payload.email)
     return {"status": "success", "data": {"message": "Password reset code sent"}}


@router.post("/reset-password", summary="Set a new password with the reset code")
def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_session)):
     UserService.reset_password(db, payload.code, payload.new_password)
     return {"status": "success", "data": {"message": "Password reset successfully"}}


@router.post("/resend-reset-otp", summary="Send a new password reset code")
def resend_reset_otp(payload: EmailRequest, db: Session = Depends(get_session)):
     UserService.resend_reset_code(db, payload.email)
     return {"status": "success", "data": {"message": "Password reset code sent"}}


# ---------------------------------------------------------------------------
# User management
# ---------------------------------------------------------------------------

@router.get("", summary="List all users (admin only)")
def list_users(
     db: Session = Depends(get_session),
     caller: dict = Depends(require_role(UserRole.ADMIN.value))
):
     users = UserService.get_all_users(db)
     return {
          "status": "success",
          "data": UserListResponse(
               users=[_build_user_response(u) for u in users],
               count=len(users),
          ),
     }


@router.get("/me", summary="Get the logged-in user")
def get_me(
     db: Session = Depends(get_session),
     caller: dict = Depends(get_current_user)
):
     user = UserService.get_user_by_id(db, caller["id"])
     return {"status": "success", "data": _build_user_response(user)}


@router.get("/{user_id}", summary="Get a user by ID")
def get_user(
     user_id: str,
     db: Session = Depends(get_session),
     caller: dict = Depends(get_current_user)
):
     user = UserService.get_user_by_id(db, user_id)
     return {"status": "success", "data": _build_user_response(user)}


@router.put("/{user_id}", summary="Update a user (self or admin)")
def update_user(
     user_id: str,
     update_data: UserUpdate,
     db: Session = Depends(get_session),
     caller: dict = Depends(get_current_user)
):
     user = UserService.update_user(db, user_id, update_data, caller)
     return {"status": "success", "data": _build_user_response(user)}


@router.delete("/{user_id}", summary="Delete a user (self or admin)")
def delete_user(
     user_id: str,
     db: Session = Depends(get_session),
     caller: dict = Depends(get_current_user)
):
     user = UserService.delete_user(db, user_id, caller)
     return {"status": "success", "data": {"id": user.id, "message": "User deleted"}}
