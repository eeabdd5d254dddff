# services/__init__.py
from . import token_service
from .user_service import UserService
from .booking_service import BookingService

__all__ = [
     "token_service",
     "UserService",
     "BookingService",
]
