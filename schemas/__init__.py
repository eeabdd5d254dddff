from .booking import (
     BookingStatusEnum,
     PaymentStatusEnum,
     GenderEnum,
     BookingCreate,
     BookingStatusUpdate,
     BookingResponse,
     BookingListResponse,
)
from .user import (
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

__all__ = [
     "BookingStatusEnum",
     "PaymentStatusEnum",
     "GenderEnum",
     "BookingCreate",
     "BookingStatusUpdate",
     "BookingResponse",
     "BookingListResponse",
     "SignupRequest",
     "VerifyCodeRequest",
     "EmailRequest",
     "LoginRequest",
     "ResetPasswordRequest",
     "UserUpdate",
     "UserResponse",
     "LoginResponse",
     "UserListResponse",
]
