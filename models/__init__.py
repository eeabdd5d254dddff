# models/__init__.py
from .base import Base
from .user import User
from .user_type import UserType, UserRole
from .token import Token, TokenPurpose, TokenStatus
from .property import Property
from .booking import Booking, BookingStatus, PaymentStatus, Gender

__all__ = [
     "Base",
     "User",
     "UserType",
     "UserRole",
     "Token",
     "TokenPurpose",
     "TokenStatus",
     "Property",
     "Booking",
     "BookingStatus",
     "PaymentStatus",
     "Gender",
]
